import logging

from pepstash.utils.logging import setup_logging


def test_setup_logging_levels_and_file(test_output_dir):
    log_file = test_output_dir / "pepstash.log"

    logger = setup_logging(verbosity=2, log_file=log_file)
    assert logger.level == logging.DEBUG
    assert len(logger.handlers) == 2

    logging.getLogger("pepstash.jobs").info("Queued ENSP001 for scoring")
    for handler in logger.handlers:
        handler.flush()
    assert "Queued ENSP001 for scoring" in log_file.read_text()

    # calling again replaces the handlers instead of stacking them
    logger = setup_logging(verbosity=0)
    assert logger.level == logging.WARNING
    assert len(logger.handlers) == 1
