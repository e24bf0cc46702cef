import logging

import colorlog

LEXER_LOG = logging.getLogger("bfc.lexer")
OPT_LOG = logging.getLogger("bfc.optimizer")
INTERP_LOG = logging.getLogger("bfc.interpreter")
CODEGEN_LOG = logging.getLogger("bfc.codegen")
CLI_LOG = logging.getLogger("bfc.cli")

loggers = [LEXER_LOG, OPT_LOG, INTERP_LOG, CODEGEN_LOG, CLI_LOG]


def init_logging(dbg: bool):
    level = logging.DEBUG if dbg else logging.WARNING
    handler = colorlog.StreamHandler()
    handler.setFormatter(
        colorlog.ColoredFormatter(
            "%(log_color)s%(levelname)-7s%(reset)s %(purple)s%(name)-15s%(reset)s - %(message)s",
        )
    )
    for logger in loggers:
        logger.setLevel(level)
        logger.handlers = [handler]
        logger.propagate = False
