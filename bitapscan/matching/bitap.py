############################################################################
# Copyright (c) 2023-2026 University of Helsinki
# # All Rights Reserved
# See file LICENSE for details.
############################################################################

"""
Bitap string matching.

Baeza-Yates-Gonnet (Shift-Or) search for exact occurrences and its Wu-Manber
extension for occurrences within a given Levenshtein distance.

Zero bits mark matching states and the state words are shifted to the left.
Most implementations scan the haystack from start to end, report the position
where a match ends and subtract the needle length to get its start. With
insertions and deletions the matched span is not as long as the needle, so
that start is often wrong. Here the haystack is scanned from its end with a
mirrored needle, and the index at which a match is completed is the start
position itself.
"""

from typing import List

import numpy as np

from .alphabet import Alphabet
from .errors import NeedleTooLong, UndefinedSymbol, InvalidDistance
from .masks import (
    AlphabetMaskTable,
    WORD_TYPE,
    ZERO,
    INITIAL_STATE,
    MAX_NEEDLE_LENGTH,
    match_bit,
    shift_left,
)

MAX_DISTANCE = MAX_NEEDLE_LENGTH


def check_distance(max_distance) -> int:
    if isinstance(max_distance, (bool, np.bool_)) or not isinstance(max_distance, (int, np.integer)):
        raise InvalidDistance(max_distance, MAX_DISTANCE)
    if max_distance < 0 or max_distance > MAX_DISTANCE:
        raise InvalidDistance(max_distance, MAX_DISTANCE)
    return int(max_distance)


class Bitap:
    """
    Matcher state for a single needle.

    Alphabet masks depend only on the needle and the alphabet and are computed
    once; the haystack can be replaced with rebind() any number of times.
    Instances are not thread-safe since rebind() replaces the haystack in place.
    """

    def __init__(self, needle, alphabet, haystack=""):
        if len(needle) > MAX_NEEDLE_LENGTH:
            raise NeedleTooLong(len(needle), MAX_NEEDLE_LENGTH)
        self._needle = needle if isinstance(needle, str) else tuple(needle)
        self._alphabet = Alphabet(alphabet)
        self._masks = AlphabetMaskTable(self._needle, self._alphabet)
        self._match_bit = match_bit(len(self._needle))
        self._haystack = ""
        self.rebind(haystack)

    @property
    def needle(self):
        return self._needle

    @property
    def alphabet(self) -> Alphabet:
        return self._alphabet

    @property
    def masks(self) -> AlphabetMaskTable:
        return self._masks

    @property
    def haystack(self):
        return self._haystack

    def rebind(self, haystack):
        self._haystack = haystack if isinstance(haystack, str) else tuple(haystack)

    def _reversed_masks(self):
        # the sentinel is logically appended to the haystack and thus comes first
        yield len(self._haystack), self._masks.sentinel_mask
        masks = self._masks.masks
        for i in range(len(self._haystack) - 1, -1, -1):
            symbol = self._haystack[i]
            mask = masks.get(symbol)
            if mask is None:
                raise UndefinedSymbol(symbol, i)
            yield i, mask

    def exact_match(self) -> List[int]:
        """
        Baeza-Yates-Gonnet algorithm.

        Returns:
            Ascending list of positions where the needle occurs exactly

        Raises:
            UndefinedSymbol: if the haystack contains a symbol outside the alphabet
        """
        located_positions = []
        haystack_len = len(self._haystack)
        state = INITIAL_STATE

        for i, mask in self._reversed_masks():
            state = shift_left(state) | mask
            if (state & self._match_bit) == ZERO and i < haystack_len:
                located_positions.append(i)

        located_positions.sort()
        return located_positions

    def approximate_match(self, max_distance: int) -> List[int]:
        """
        Wu-Manber algorithm.

        Keeps one state row per number of allowed edits. Row k has a zero bit
        wherever a prefix of the needle can be aligned to the scanned part of
        the haystack with at most k insertions, deletions or substitutions.

        Several adjacent positions can be reported for what is a single
        occurrence, e.g. a short homopolymer within a long one; all of them
        are returned.

        Args:
            max_distance: maximum Levenshtein distance, 0 gives exact matches

        Returns:
            Ascending list of positions where a match within max_distance edits starts

        Raises:
            InvalidDistance: if max_distance is not an integer in [0, MAX_DISTANCE]
            UndefinedSymbol: if the haystack contains a symbol outside the alphabet
        """
        max_distance = check_distance(max_distance)
        located_positions = []
        haystack_len = len(self._haystack)
        rows = np.full(max_distance + 1, INITIAL_STATE, dtype=WORD_TYPE)

        for i, mask in self._reversed_masks():
            old = rows
            rows = np.empty_like(old)
            rows[0] = shift_left(old[0]) | mask
            for k in range(1, max_distance + 1):
                insertion = old[k - 1]
                substitution = shift_left(old[k - 1])
                deletion = shift_left(rows[k - 1])
                match = shift_left(old[k]) | mask
                rows[k] = insertion & substitution & deletion & match

            if (rows[max_distance] & self._match_bit) == ZERO and i < haystack_len:
                located_positions.append(i)

        located_positions.sort()
        return located_positions

    def __repr__(self):
        return "Bitap(needle=%r, alphabet=%r)" % (self._needle, self._alphabet)


def find_positions(needle, haystack, alphabet, max_distance: int = 0) -> List[int]:
    max_distance = check_distance(max_distance)
    matcher = Bitap(needle, alphabet, haystack)
    if max_distance == 0:
        return matcher.exact_match()
    return matcher.approximate_match(max_distance)
