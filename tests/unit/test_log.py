import os

from rnapipe import log
from rnapipe.log import logger, logger_cl


def test_commands_logged_separately(tmpdir):
    log_dir = str(tmpdir.join("Logs"))
    handler = log.setup_local_logging({"log_dir": log_dir})
    try:
        logger.info("Aligning s1")
        logger_cl.debug("STAR --runThreadN 8")
    finally:
        handler.pop_application()
        handler.close()
    with open(os.path.join(log_dir, "rnapipe.log")) as in_handle:
        main_log = in_handle.read()
    with open(os.path.join(log_dir, "rnapipe-commands.log")) as in_handle:
        commands_log = in_handle.read()
    assert "Aligning s1" in main_log
    assert "STAR" not in main_log
    assert "STAR --runThreadN 8" in commands_log
    assert "Aligning" not in commands_log
