"""
Integration tests for failure-tolerant pipelines: inner attempts that may
fail are tagged as outcomes so the outer stream keeps running.
"""

import pytest

from signalkit import Err, FlattenStrategy, Ok, Signal, SignalProducer


class AuthError(Exception):
    pass


class FakeAuth:
    """Login service accepting one password."""

    def __init__(self, password):
        self.password = password
        self.attempts = 0

    def login(self, credentials):
        def start_handler(observer, lifetime):
            self.attempts += 1
            user, password = credentials
            if password != self.password:
                observer.send_failed(AuthError(f"bad password for {user}"))
                return
            observer.send_value(f"token:{user}")
            observer.send_completed()

        return SignalProducer(start_handler)


@pytest.fixture
def auth():
    return FakeAuth("hunter2")


@pytest.mark.integration
def test_failed_attempt_does_not_end_outer_stream(auth, recorder):
    # Arrange
    logins, submit = Signal.pipe()
    logins.flat_map(
        FlattenStrategy.LATEST, lambda credentials: auth.login(credentials).to_outcomes()
    ).observe(recorder)

    # Act
    submit.send_value(("ada", "wrong"))
    submit.send_value(("ada", "hunter2"))

    # Assert
    first, second = recorder.values
    assert first.is_err and isinstance(first.error, AuthError)
    assert second == Ok("token:ada")
    assert recorder.terminal is None
    assert auth.attempts == 2


@pytest.mark.integration
def test_without_outcomes_first_failure_ends_the_stream(auth, recorder):
    """Contrast: an untagged failing inner terminates the whole pipeline."""
    # Arrange
    logins, submit = Signal.pipe()
    logins.flat_map(FlattenStrategy.LATEST, auth.login).observe(recorder)

    # Act
    submit.send_value(("ada", "wrong"))
    submit.send_value(("ada", "hunter2"))

    # Assert
    assert recorder.values == []
    assert isinstance(recorder.errors[0], AuthError)
    assert auth.attempts == 1


@pytest.mark.integration
def test_outcomes_partition_into_tokens_and_errors(auth, make_recorder):
    # Arrange
    logins, submit = Signal.pipe()
    results = logins.flat_map(
        FlattenStrategy.MERGE, lambda credentials: auth.login(credentials).to_outcomes()
    )
    tokens, errors = make_recorder("tokens"), make_recorder("errors")
    results.filter_values().observe(tokens)
    results.filter_errors().observe(errors)
    attempts = [("ada", "hunter2"), ("bob", "x"), ("cy", "hunter2"), ("di", "y")]

    # Act
    for credentials in attempts:
        submit.send_value(credentials)
    submit.send_completed()

    # Assert
    assert tokens.values == ["token:ada", "token:cy"]
    assert [str(error) for error in errors.values] == [
        "bad password for bob",
        "bad password for di",
    ]
    assert len(tokens.values) + len(errors.values) == len(attempts)
    assert tokens.completed and errors.completed


@pytest.mark.integration
def test_dematerialize_restores_the_first_failure(auth, recorder):
    """Outcomes turned back into events fail at the first Err."""
    # Arrange
    attempts = SignalProducer.from_values([("ada", "hunter2"), ("bob", "x"), ("cy", "hunter2")])

    # Act
    attempts.flat_map(
        FlattenStrategy.CONCAT, lambda credentials: auth.login(credentials).to_outcomes()
    ).dematerialize().start(recorder)

    # Assert
    assert recorder.values == ["token:ada"]
    assert isinstance(recorder.errors[0], AuthError)
    assert auth.attempts == 2


@pytest.mark.integration
def test_drop_error_ignores_failed_attempts(auth):
    tokens = []

    SignalProducer.from_values([("ada", "x"), ("bob", "hunter2")]).flat_map(
        FlattenStrategy.CONCAT, lambda credentials: auth.login(credentials).drop_error()
    ).start_with_values(tokens.append)

    assert tokens == ["token:bob"]


@pytest.mark.integration
def test_observe_result_matches_to_outcomes(auth):
    """observe_result on the raw stream sees what to_outcomes carries as values."""
    # Arrange
    direct, tagged = [], []
    producer = SignalProducer.from_values([1, 2]).flat_map(
        FlattenStrategy.CONCAT,
        lambda n: SignalProducer.of(n) if n == 1 else SignalProducer.failure("two"),
    )

    # Act
    producer.start_with_result(direct.append)
    producer.to_outcomes().start_with_values(tagged.append)

    # Assert
    assert direct == tagged == [Ok(1), Err("two")]
