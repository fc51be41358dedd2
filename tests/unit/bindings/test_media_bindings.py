import pytest

from signalkit import Err, Ok
from signalkit.bindings import (
    AsynchronousKeyValueLoading,
    KeyValueStatus,
    Seekable,
    load_values,
    seek,
)


class FakeAsset:
    """Asset whose loads finish when the test calls `finish()`."""

    def __init__(self, statuses):
        self.statuses = statuses
        self.requests = []
        self._handlers = []

    def load_values_asynchronously(self, keys, completion_handler):
        self.requests.append(list(keys))
        self._handlers.append(completion_handler)

    def status_of_value(self, key):
        return self.statuses[key]

    def finish(self):
        for handler in self._handlers:
            handler()
        self._handlers = []


class FakePlayerItem:
    def __init__(self, finished=True):
        self.finished = finished
        self.seeks = []

    def seek(self, time, completion_handler):
        self.seeks.append(time)
        completion_handler(self.finished)


@pytest.mark.unit
@pytest.mark.bindings
def test_fakes_satisfy_media_protocols():
    assert isinstance(FakeAsset({}), AsynchronousKeyValueLoading)
    assert isinstance(FakePlayerItem(), Seekable)


@pytest.mark.unit
@pytest.mark.bindings
def test_key_value_status_codes():
    assert [status.value for status in KeyValueStatus] == [0, 1, 2, 3, 4]


@pytest.mark.unit
@pytest.mark.bindings
def test_load_values_sends_status_per_key_then_completes(recorder):
    # Arrange
    error = IOError("unreachable")
    asset = FakeAsset(
        {
            "duration": (KeyValueStatus.LOADED, None),
            "tracks": (KeyValueStatus.FAILED, error),
        }
    )
    load_values(asset, ["duration", "tracks"]).start(recorder)

    # Act
    asset.finish()

    # Assert
    assert recorder.values == [
        {"duration": Ok(KeyValueStatus.LOADED), "tracks": Err(error)}
    ]
    assert recorder.completed


@pytest.mark.unit
@pytest.mark.bindings
def test_failed_status_without_error_stays_ok(recorder):
    """FAILED only becomes Err when the asset reports an error for it."""
    asset = FakeAsset({"duration": (KeyValueStatus.FAILED, None)})
    load_values(asset, ("duration",)).start(recorder)

    asset.finish()

    assert recorder.values == [{"duration": Ok(KeyValueStatus.FAILED)}]


@pytest.mark.unit
@pytest.mark.bindings
def test_load_values_is_cold(recorder):
    """Nothing is requested until start; each start requests again."""
    # Arrange
    asset = FakeAsset({"duration": (KeyValueStatus.LOADED, None)})
    producer = load_values(asset, ["duration"])

    # Act
    requested_before_start = list(asset.requests)
    producer.start(recorder)
    producer.start()

    # Assert
    assert requested_before_start == []
    assert asset.requests == [["duration"], ["duration"]]
    assert recorder.values == []


@pytest.mark.unit
@pytest.mark.bindings
def test_load_values_outcomes_feed_projections(recorder):
    """Per-key outcomes compose with the outcome filters."""
    # Arrange
    asset = FakeAsset(
        {
            "duration": (KeyValueStatus.LOADED, None),
            "tracks": (KeyValueStatus.FAILED, IOError("gone")),
        }
    )
    producer = (
        load_values(asset, ["duration", "tracks"])
        .map(lambda statuses: statuses["duration"])
        .filter_values()
    )
    producer.start(recorder)

    # Act
    asset.finish()

    # Assert
    assert recorder.values == [KeyValueStatus.LOADED]


@pytest.mark.unit
@pytest.mark.bindings
@pytest.mark.parametrize("finished", [True, False], ids=["finished", "cut-short"])
def test_seek_sends_finished_flag_then_completes(finished, recorder):
    # Arrange
    item = FakePlayerItem(finished=finished)

    # Act
    seek(item, 12.5).start(recorder)

    # Assert
    assert item.seeks == [12.5]
    assert recorder.values == [finished]
    assert recorder.completed
