############################################################################
# Copyright (c) 2020-2026 University of Helsinki
# # All Rights Reserved
# See file LICENSE for details.
############################################################################

import logging
import sys

logger = logging.getLogger('BitapScan')

LOG_FORMAT = '%(asctime)s - %(levelname)s - %(message)s'


def list_to_str(element_list, element_delim=','):
    if len(element_list) == 0:
        return "."
    return element_delim.join(list(map(str, element_list)))


def set_logger(logger_instance, debug=False):
    logger_instance.setLevel(logging.DEBUG if debug else logging.INFO)
    ch = logging.StreamHandler(sys.stdout)
    ch.setLevel(logging.DEBUG if debug else logging.INFO)
    formatter = logging.Formatter(LOG_FORMAT)
    ch.setFormatter(formatter)
    logger_instance.addHandler(ch)


def _get_log_params():
    # file of the first file handler (if any) and the current level, passed to spawned workers
    log_file = None
    for handler in logger.handlers:
        if isinstance(handler, logging.FileHandler):
            log_file = handler.baseFilename
            break
    return log_file, logger.level


def setup_worker_logging(log_file, log_level):
    # spawned processes start with an unconfigured logger
    if logger.handlers:
        return
    logger.setLevel(log_level)
    if log_file:
        handler = logging.FileHandler(log_file)
    else:
        handler = logging.StreamHandler(sys.stdout)
    handler.setLevel(log_level)
    handler.setFormatter(logging.Formatter(LOG_FORMAT))
    logger.addHandler(handler)
