from signalkit import (
    Action,
    FlattenStrategy,
    MutableProperty,
    Signal,
    SignalProducer,
)

# ------------------------------------------------------------------------------------------------

print()
print("=" * 100)
print("Signals and producers")
print("-" * 100)
print()

# A signal is hot: observers see what is sent after they attach.
temperatures, thermometer = Signal.pipe()
temperatures.observe_values(lambda t: print(f"Temperature: {t}"))

thermometer.send_value(21.5)
thermometer.send_value(22.0)

# A producer is cold: every start runs the work again.
readings = SignalProducer.from_values([1, 2, 3]) >> (lambda x: x * 10)
readings.start_with_values(lambda r: print(f"First run: {r}"))
readings.start_with_values(lambda r: print(f"Second run: {r}"))

# ------------------------------------------------------------------------------------------------

print()
print("=" * 100)
print("Failures as values")
print("-" * 100)
print()


class LoginError(Exception):
    pass


def login(password):
    if password == "hunter2":
        return SignalProducer.of("token-123")
    return SignalProducer.failure(LoginError("wrong password"))


attempts, submit = Signal.pipe()

# Without to_outcomes() the first wrong password would end the whole stream.
results = attempts.flat_map(
    FlattenStrategy.LATEST, lambda password: login(password).to_outcomes()
)
results.filter_values().observe_values(lambda token: print(f"Logged in with {token}"))
results.filter_errors().observe_values(lambda error: print(f"Login failed: {error}"))

submit.send_value("letmein")
submit.send_value("hunter2")

# drop_error() simply forgets the failure and completes.
login("nope").drop_error().start(
    lambda event: print(f"Dropped error, saw: {event}")
)

# ------------------------------------------------------------------------------------------------

print()
print("=" * 100)
print("Filtering and taps")
print("-" * 100)
print()

mixed, send_mixed = Signal.pipe()
mixed.filter_type(int).observe_values(lambda n: print(f"Integer: {n}"))
mixed.skip_not_none().observe_values(lambda _: print("Saw a None"))
mixed.on_value(lambda v: print(f"Tap saw {v!r}")).on_terminated(
    lambda: print("Tap saw the end")
).observe(None)

for value in (1, "two", None, 3):
    send_mixed.send_value(value)
send_mixed.send_completed()

# ------------------------------------------------------------------------------------------------

print()
print("=" * 100)
print("Properties and actions")
print("-" * 100)
print()

name = MutableProperty("Alice", key="name")
greeting = name >> (lambda n: f"Hello, {n}")
greeting.subscribe(print, call_immediately=True)
name.value = "Bob"


class ConsoleHud:
    def show(self, animated=True):
        print("HUD: spinning")

    def hide(self, animated=True):
        print("HUD: hidden")


class ConsoleButton:
    def __init__(self):
        self._alpha = None

    @property
    def background_alpha(self):
        return self._alpha

    @background_alpha.setter
    def background_alpha(self, alpha):
        self._alpha = alpha
        print(f"Button alpha: {alpha}")


save = Action(lambda text: SignalProducer.of(len(text)))
save.bind_loading(ConsoleHud())
save.bind_disabled(ConsoleButton())
save.values.observe_values(lambda n: print(f"Saved {n} characters"))

save.apply("hello world").start()
