import itertools

import pytest

from signalkit import Err, Event, Ok, SignalProducer


@pytest.mark.unit
@pytest.mark.producer
def test_each_start_runs_the_handler_afresh(make_recorder):
    """Producers are cold: two starts give two independent runs."""
    # Arrange
    starts = []

    def start_handler(observer, lifetime):
        starts.append(observer)
        observer.send_value(len(starts))
        observer.send_completed()

    producer = SignalProducer(start_handler)
    first, second = make_recorder("first"), make_recorder("second")

    # Act
    producer.start(first)
    producer.start(second)

    # Assert
    assert len(starts) == 2
    assert first.values == [1]
    assert second.values == [2]


@pytest.mark.unit
@pytest.mark.producer
def test_nothing_happens_until_started():
    starts = []
    producer = SignalProducer(lambda observer, lifetime: starts.append(observer))

    mapped = producer.map(str).filter(bool)

    assert starts == []
    mapped.start()
    assert len(starts) == 1


@pytest.mark.unit
@pytest.mark.producer
@pytest.mark.parametrize(
    "producer, values, terminal",
    [
        (SignalProducer.empty(), [], Event.COMPLETED),
        (SignalProducer.of("x"), ["x"], Event.COMPLETED),
        (SignalProducer.from_values(range(3)), [0, 1, 2], Event.COMPLETED),
        (SignalProducer.failure("boom"), [], Event.of_failure("boom")),
    ],
    ids=["empty", "of", "from_values", "failure"],
)
def test_factories(producer, values, terminal, recorder):
    producer.start(recorder)

    assert recorder.values == values
    assert recorder.terminal == terminal


@pytest.mark.unit
@pytest.mark.producer
def test_disposing_handle_interrupts_and_releases_lifetime(recorder):
    """Disposing the start handle releases the run's resources, then interrupts."""
    # Arrange
    order = []

    def start_handler(observer, lifetime):
        lifetime.add(lambda: order.append("released"))

    producer = SignalProducer(start_handler)
    handle = producer.start(lambda event: (order.append(event.kind.value), recorder(event)))

    # Act
    handle.dispose()
    handle.dispose()

    # Assert
    assert order == ["released", "interrupted"]
    assert recorder.interrupted


@pytest.mark.unit
@pytest.mark.producer
def test_terminal_event_releases_lifetime(counter, recorder):
    # Arrange
    inputs = []

    def start_handler(observer, lifetime):
        lifetime.add(counter)
        inputs.append(observer)

    SignalProducer(start_handler).start(recorder)

    # Act
    inputs[0].send_completed()

    # Assert
    assert counter.calls == 1
    assert recorder.completed


@pytest.mark.unit
@pytest.mark.producer
def test_disposing_after_completion_does_not_interrupt(recorder):
    handle = SignalProducer.of(1).start(recorder)

    handle.dispose()

    assert recorder.completed
    assert len(recorder.terminals) == 1


@pytest.mark.unit
@pytest.mark.producer
def test_take_stops_an_unbounded_synchronous_upstream(recorder):
    """take() interrupts a synchronous upstream run while it is still iterating."""
    # Arrange
    pulled = []

    def numbers():
        for number in itertools.count():
            pulled.append(number)
            yield number

    # Act
    SignalProducer.from_values(numbers()).take(3).start(recorder)

    # Assert
    assert recorder.values == [0, 1, 2]
    assert recorder.completed
    assert pulled == [0, 1, 2]


@pytest.mark.unit
@pytest.mark.producer
def test_interrupter_stops_synchronous_run(recorder):
    # Arrange
    interrupters = []

    def setup(signal, interrupter):
        interrupters.append(interrupter)
        signal.observe(recorder)
        signal.observe_values(lambda v: interrupters[0].dispose() if v == 2 else None)

    # Act
    SignalProducer.from_values([1, 2, 3, 4]).start_with_signal(setup)

    # Assert
    assert recorder.values == [1, 2]
    assert recorder.interrupted


@pytest.mark.unit
@pytest.mark.producer
def test_start_with_signal_observers_see_every_event(make_recorder):
    # Arrange
    first, second = make_recorder("first"), make_recorder("second")

    def setup(signal, interrupter):
        signal.observe(first)
        signal.map(lambda x: -x).observe(second)

    # Act
    SignalProducer.from_values([1, 2]).start_with_signal(setup)

    # Assert
    assert first.values == [1, 2]
    assert second.values == [-1, -2]
    assert first.completed and second.completed


@pytest.mark.unit
@pytest.mark.producer
def test_start_with_signal_disposed_during_setup_never_starts():
    starts = []
    producer = SignalProducer(lambda observer, lifetime: starts.append(observer))

    producer.start_with_signal(lambda signal, interrupter: interrupter.dispose())

    assert starts == []


@pytest.mark.unit
@pytest.mark.producer
def test_start_with_result_wraps_outcomes():
    # Arrange
    outcomes = []

    def start_handler(observer, lifetime):
        observer.send_value(1)
        observer.send_failed("boom")

    # Act
    SignalProducer(start_handler).start_with_result(outcomes.append)

    # Assert
    assert outcomes == [Ok(1), Err("boom")]


@pytest.mark.unit
@pytest.mark.producer
def test_start_with_callbacks(make_counter):
    # Arrange
    values, failed, completed, interrupted = [], [], make_counter(), make_counter()

    # Act
    SignalProducer.from_values("ab").start_with_values(values.append)
    SignalProducer.failure("e").start_with_failed(failed.append)
    SignalProducer.empty().start_with_completed(completed)
    SignalProducer.never().start_with_interrupted(interrupted).dispose()

    # Assert
    assert values == ["a", "b"]
    assert failed == ["e"]
    assert completed.calls == 1
    assert interrupted.calls == 1


@pytest.mark.unit
@pytest.mark.producer
def test_lifted_operators_apply_per_run(recorder):
    """Combinators lift onto every run of the producer."""
    # Arrange
    producer = (
        SignalProducer.from_values(range(10))
        & (lambda x: x % 3 == 0)
    ) >> (lambda x: x * 2)

    # Act
    producer.skip(1).take(2).collect().start(recorder)

    # Assert
    assert recorder.values == [[6, 12]]
    assert recorder.completed


@pytest.mark.unit
@pytest.mark.producer
def test_take_zero_completes_without_values(recorder):
    SignalProducer.from_values([1, 2]).take(0).start(recorder)

    assert recorder.values == []
    assert recorder.completed


@pytest.mark.unit
@pytest.mark.producer
def test_lifted_map_error_and_filter_map(recorder, make_recorder):
    # Arrange
    failing = SignalProducer.failure("boom").map_error(str.upper)
    parsed = SignalProducer.from_values(["1", "x", "2"]).filter_map(
        lambda s: int(s) if s.isdigit() else None
    )
    parsed_recorder = make_recorder("parsed")

    # Act
    failing.start(recorder)
    parsed.start(parsed_recorder)

    # Assert
    assert recorder.errors == ["BOOM"]
    assert parsed_recorder.values == [1, 2]


@pytest.mark.unit
@pytest.mark.producer
def test_materialize_then_dematerialize_restores_failure(recorder):
    def start_handler(observer, lifetime):
        observer.send_value("a")
        observer.send_failed("boom")

    SignalProducer(start_handler).materialize().dematerialize().start(recorder)

    assert recorder.values == ["a"]
    assert recorder.errors == ["boom"]


@pytest.mark.unit
@pytest.mark.producer
def test_disposing_lifted_run_interrupts_through_the_chain(recorder, counter):
    """Interruption travels through lifted operators and fires their taps."""
    # Arrange
    producer = SignalProducer.never().map(str).on(interrupted=counter)

    # Act
    producer.start(recorder).dispose()

    # Assert
    assert counter.calls == 1
    assert recorder.interrupted


@pytest.mark.unit
@pytest.mark.producer
def test_from_signal_observes_from_start(pipe, recorder):
    # Arrange
    signal, observer = pipe
    observer.send_value("missed")
    producer = SignalProducer.from_signal(signal)

    # Act
    producer.start(recorder)
    observer.send_value("seen")
    observer.send_completed()

    # Assert
    assert recorder.values == ["seen"]
    assert recorder.completed
