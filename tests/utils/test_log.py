from pathlib import Path

from loguru import logger

from twlauncher.utils.log import anonymize_path, setup_logging


def test_anonymize_path_windows() -> None:
    assert (
        anonymize_path(r"C:\Users\someone\Documents\file.txt")
        == r"C:\Users\...\Documents\file.txt"
    )
    assert (
        anonymize_path(r"Error at D:\Users\abc\Games\mod.pack: broken")
        == r"Error at D:\Users\...\Games\mod.pack: broken"
    )


def test_anonymize_path_linux_and_macos() -> None:
    assert anonymize_path("/home/someone/.steam/foo.pack") == "/home/../.steam/foo.pack"
    assert anonymize_path("/Users/someone/Library/foo.pack") == "/Users/../Library/foo.pack"


def test_anonymize_path_without_paths() -> None:
    assert anonymize_path("Nothing to see here") == "Nothing to see here"


def test_setup_logging_rotates_log(tmp_path: Path) -> None:
    log_file = setup_logging(debug=True, log_folder=tmp_path)
    logger.info("First run")
    logger.remove()

    log_file = setup_logging(debug=False, log_folder=tmp_path)
    logger.info("Second run")
    logger.debug("Not written when debug is off")
    logger.remove()

    old_log_file = log_file.with_name(log_file.stem + ".old.log")
    assert "First run" in old_log_file.read_text()
    assert "Second run" in log_file.read_text()
    assert "Not written" not in log_file.read_text()
