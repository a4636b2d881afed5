import asyncio
from typing import Any, Callable, Dict, List, Optional

import pytest

from custom_components.tuya_cloud.catalog import CapabilityCatalog, serialize_domains
from custom_components.tuya_cloud.models import TuyaDevice


class _FakeHandle:
    def __init__(self) -> None:
        self.cancelled = False

    def cancel(self) -> None:
        self.cancelled = True


class _ScheduledCall:
    def __init__(self, delay: float, callback: Callable[..., Any], args: tuple) -> None:
        self.delay = delay
        self.callback = callback
        self.args = args
        self.handle = _FakeHandle()


class _FakeScheduler:
    """Records run_after calls; tests fire them explicitly."""

    def __init__(self) -> None:
        self.loop = None
        self.calls: List[_ScheduledCall] = []

    def run_after(self, delay, callback, *args):
        call = _ScheduledCall(delay, callback, args)
        self.calls.append(call)
        return call.handle

    @property
    def last(self) -> _ScheduledCall:
        return self.calls[-1]

    def pending(self) -> List[_ScheduledCall]:
        return [c for c in self.calls if not c.handle.cancelled]

    async def fire(self, call: _ScheduledCall) -> Any:
        result = call.callback(*call.args)
        if asyncio.iscoroutine(result):
            result = await result
        return result


@pytest.fixture
def scheduler() -> _FakeScheduler:
    return _FakeScheduler()


@pytest.fixture
def catalog() -> CapabilityCatalog:
    return CapabilityCatalog()


def _integer(lo, hi, scale=0, unit=None) -> Dict[str, Any]:
    values = {"type": "Integer", "min": lo, "max": hi, "scale": scale, "step": 1}
    if unit:
        values["unit"] = unit
    return values


def _enum(*choices) -> Dict[str, Any]:
    return {"type": "Enum", "range": list(choices)}


def _colour(h=(1, 360), s=(1, 1000), v=(1, 1000)) -> Dict[str, Any]:
    return {
        "type": "Json",
        "h": {"min": h[0], "max": h[1], "scale": 0, "step": 1},
        "s": {"min": s[0], "max": s[1], "scale": 0, "step": 1},
        "v": {"min": v[0], "max": v[1], "scale": 0, "step": 1},
    }


@pytest.fixture
def domains():
    """Builders for raw code -> values maps."""

    class _Domains:
        integer = staticmethod(_integer)
        enum = staticmethod(_enum)
        colour = staticmethod(_colour)
        boolean = staticmethod(lambda: {"type": "Boolean"})

    return _Domains


@pytest.fixture
def make_device():
    def _make(
        functions: Optional[Dict[str, Any]] = None,
        status: Optional[Dict[str, Any]] = None,
        category: str = "dj",
        state: Optional[Dict[str, Any]] = None,
        device_id: str = "dev1",
        name: str = "Lamp",
        product_id: str = "",
    ) -> TuyaDevice:
        return TuyaDevice(
            id=device_id,
            name=name,
            category=category,
            product_id=product_id,
            online=True,
            functions_json=serialize_domains(functions or {}),
            status_json=serialize_domains(status or {}),
            state=dict(state or {}),
        )

    return _make
