import logging

from meetlobby.backend import logging_config


def test_setup_logging_applies_level_and_format(monkeypatch) -> None:
    root = logging.getLogger()
    original_handlers = list(root.handlers)
    original_level = root.level
    monkeypatch.setenv("LOG_LEVEL", "debug")
    try:
        logging_config.setup_logging(force=True)

        assert root.level == logging.DEBUG
        assert len(root.handlers) == 1
        assert root.handlers[0].formatter._fmt == logging_config.DEFAULT_FORMAT
    finally:
        for handler in list(root.handlers):
            root.removeHandler(handler)
        for handler in original_handlers:
            root.addHandler(handler)
        root.setLevel(original_level)


def test_setup_logging_is_idempotent(monkeypatch) -> None:
    monkeypatch.setattr(logging_config, "_INITIALIZED", True)
    root = logging.getLogger()
    handlers_before = list(root.handlers)

    logging_config.setup_logging()

    assert root.handlers == handlers_before
