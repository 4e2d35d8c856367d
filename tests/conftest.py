import logging

import pytest


@pytest.fixture(autouse=True)
def _reset_agentinstall_logger():
    # init_logging() detaches the logger from root; put it back so caplog sees records
    yield
    logger = logging.getLogger("agentinstall")
    for h in list(logger.handlers):
        logger.removeHandler(h)
        h.close()
    logger.propagate = True
    logger.setLevel(logging.NOTSET)
