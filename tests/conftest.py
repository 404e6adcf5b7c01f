#
# Pytest Fixtures
#

# Standard library -----------------------------------------------------------------------------------------------------
import logging
import time

# Third-party ----------------------------------------------------------------------------------------------------------
import pytest

# Fixtures -------------------------------------------------------------------------------------------------------------


@pytest.fixture(params=[False, True], ids=["logging-off", "logging-on"])
def logging_enabled(request, caplog):
    """Run the test twice, with log output suppressed and with DEBUG records captured."""
    if request.param:
        caplog.set_level(logging.DEBUG, logger="safestr")
        yield True
    else:
        logging.disable(logging.CRITICAL)
        try:
            yield False
        finally:
            logging.disable(logging.NOTSET)


@pytest.fixture
def local_tz(monkeypatch):
    """Pin the process local time zone, POSIX TZ string passed to the returned setter."""
    if not hasattr(time, "tzset"):
        pytest.skip("time.tzset() is not available on this platform")

    def _set(tz: str) -> None:
        monkeypatch.setenv("TZ", tz)
        time.tzset()

    yield _set
    monkeypatch.undo()
    time.tzset()
