"""Tests for AsyncOperation — single-flight execute/reset."""

import asyncio

from settlex import AsyncOperation, AsyncOperationState, Lifecycle


async def _drain():
    for _ in range(5):
        await asyncio.sleep(0)


class TestState:
    def test_initial_is_idle(self):
        state = AsyncOperationState()
        assert not state.is_loading
        assert not state.is_success
        assert not state.is_error

    def test_success_needs_data(self):
        assert AsyncOperationState(data=["Vale"]).is_success
        assert not AsyncOperationState(data=None).is_success

    def test_loading_excludes_success_and_error(self):
        state = AsyncOperationState(is_loading=True, data=[1], error=RuntimeError("x"))
        assert not state.is_success
        assert not state.is_error


class TestExecute:
    def test_success(self):
        async def scenario():
            async def fetch_styles(cancel):
                return ["Vale", "Google"]

            op = AsyncOperation(fetch_styles)
            await op.execute()
            return op.state.get()

        state = asyncio.run(scenario())
        assert state.is_success
        assert state.data == ["Vale", "Google"]
        assert state.error is None

    def test_loading_visible_before_first_await(self):
        async def scenario():
            async def fetch(cancel):
                return 1

            op = AsyncOperation(fetch)
            task = op.execute()
            loading = op.is_loading
            await task
            return loading, op.is_loading

        assert asyncio.run(scenario()) == (True, False)

    def test_error_captured_not_raised(self):
        async def scenario():
            async def install(cancel):
                raise RuntimeError("download failed")

            op = AsyncOperation(install)
            await op.execute()
            return op.state.get()

        state = asyncio.run(scenario())
        assert state.is_error
        assert str(state.error) == "download failed"

    def test_error_keeps_previous_data(self):
        async def scenario():
            results = iter([["Vale"], RuntimeError("offline")])

            async def fetch(cancel):
                item = next(results)
                if isinstance(item, Exception):
                    raise item
                return item

            op = AsyncOperation(fetch)
            await op.execute()
            await op.execute()
            return op.state.get()

        state = asyncio.run(scenario())
        assert state.is_error
        assert state.data == ["Vale"]

    def test_second_execute_wins_when_first_never_resolves(self):
        async def scenario():
            never = asyncio.get_running_loop().create_future()
            calls = []

            async def fetch(cancel):
                calls.append(cancel)
                if len(calls) == 1:
                    await never
                return "second"

            op = AsyncOperation(fetch)
            op.execute()
            await op.execute()
            return op.state.get(), calls[0].cancelled

        state, first_cancelled = asyncio.run(scenario())
        assert state.data == "second"
        assert state.is_success
        assert first_cancelled

    def test_earlier_call_finishing_late_is_ignored(self):
        async def scenario():
            gate = asyncio.get_running_loop().create_future()
            values = iter(["first", "second"])

            async def fetch(cancel):
                value = next(values)
                if value == "first":
                    await gate
                return value

            op = AsyncOperation(fetch)
            op.execute()
            await op.execute()
            gate.set_result(None)
            await _drain()
            return op.data

        assert asyncio.run(scenario()) == "second"


class TestReset:
    def test_reset_clears(self):
        async def scenario():
            async def fetch(cancel):
                return 1

            op = AsyncOperation(fetch)
            await op.execute()
            op.reset()
            return op.state.get()

        assert asyncio.run(scenario()) == AsyncOperationState()

    def test_reset_ignores_in_flight_result(self):
        async def scenario():
            gate = asyncio.get_running_loop().create_future()

            async def fetch(cancel):
                await gate
                return "late"

            op = AsyncOperation(fetch)
            task = op.execute()
            op.reset()
            gate.set_result(None)
            await task
            return op.state.get()

        assert asyncio.run(scenario()) == AsyncOperationState()


class TestLifecycle:
    def test_no_state_after_destroy(self):
        async def scenario():
            gate = asyncio.get_running_loop().create_future()

            async def fetch(cancel):
                await gate
                return "late"

            lifecycle = Lifecycle("styles-page")
            op = AsyncOperation(fetch, lifecycle=lifecycle)
            seen = []
            op.state.subscribe(seen.append)
            task = op.execute()
            lifecycle.destroy()
            gate.set_result(None)
            await task
            return seen, op.state.get()

        seen, state = asyncio.run(scenario())
        assert len(seen) == 1
        assert state.is_loading

    def test_execute_after_dispose(self):
        async def scenario():
            calls = []

            async def fetch(cancel):
                calls.append(1)
                return 1

            op = AsyncOperation(fetch)
            op.dispose()
            await op.execute()
            return calls, op.state.get()

        calls, state = asyncio.run(scenario())
        assert calls == []
        assert state == AsyncOperationState()

    def test_repr(self):
        async def fetch(cancel):
            return 1

        assert repr(AsyncOperation(fetch, name="styles")) == "AsyncOperation(styles, idle)"
