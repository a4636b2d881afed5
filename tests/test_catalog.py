import threading
import time

from custom_components.tuya_cloud.catalog import (
    DEFAULT_SPECS,
    CapabilityCatalog,
    ValueKind,
    parse_specification,
    serialize_domains,
)

SPECIFICATION = {
    "category": "dj",
    "functions": [
        {"code": "switch_led", "type": "Boolean", "values": "{}"},
        {"code": "work_mode", "type": "Enum", "values": '{"range":["white","colour","scene","music"]}'},
        {"code": "bright_value_v2", "type": "Integer", "values": '{"min":10,"max":1000,"scale":0,"step":1}'},
        {
            "code": "colour_data_v2",
            "type": "Json",
            "values": '{"h":{"min":0,"scale":0,"unit":"","max":360,"step":1},'
            '"s":{"min":0,"scale":0,"unit":"","max":1000,"step":1},'
            '"v":{"min":0,"scale":0,"unit":"","max":1000,"step":1}}',
        },
    ],
    "status": [
        {"code": "switch_led", "type": "Boolean", "values": "{}"},
        {"code": "temp_current", "type": "Integer", "values": '{"unit":"℃","min":-200,"max":600,"scale":1,"step":1}'},
    ],
}


def test_parse_specification_decodes_values_and_tags_type() -> None:
    category, functions, status = parse_specification(SPECIFICATION)

    assert category == "dj"
    assert functions["bright_value_v2"] == {"min": 10, "max": 1000, "scale": 0, "step": 1, "type": "Integer"}
    assert functions["switch_led"] == {"type": "Boolean"}
    assert set(status) == {"switch_led", "temp_current"}


def test_parse_specification_tolerates_missing_lists() -> None:
    assert parse_specification({"category": "cz"}) == ("cz", {}, {})


def test_domains_are_parsed_into_function_specs(make_device) -> None:
    _, functions, status = parse_specification(SPECIFICATION)
    device = make_device(functions=functions, status=status)
    catalog = CapabilityCatalog()

    bright = catalog.functions(device)["bright_value_v2"]
    assert bright.kind is ValueKind.INTEGER
    assert (bright.min, bright.max) == (10, 1000)

    mode = catalog.functions(device)["work_mode"]
    assert mode.kind is ValueKind.ENUM
    assert mode.range == ("white", "colour", "scene", "music")

    colour = catalog.functions(device)["colour_data_v2"]
    assert colour.is_color
    assert (colour.h.min, colour.h.max, colour.s.max, colour.v.max) == (0, 360, 1000, 1000)

    temp = catalog.status_set(device)["temp_current"]
    assert temp.scale == 1
    assert temp.unit == "℃"


def test_identical_maps_share_one_cached_object(make_device) -> None:
    raw = {"switch_led": {"type": "Boolean"}}
    first = make_device(functions=raw, device_id="a")
    second = make_device(functions=dict(raw), device_id="b")
    catalog = CapabilityCatalog()

    assert catalog.functions(first) is catalog.functions(second)


def test_get_or_compute_parses_once_under_contention() -> None:
    catalog = CapabilityCatalog()
    calls = []
    results = []
    barrier = threading.Barrier(8)

    def _factory(key):
        calls.append(key)
        time.sleep(0.01)
        return {"key": key}

    def _worker():
        barrier.wait()
        results.append(catalog.get_or_compute("domains", "same", _factory))

    threads = [threading.Thread(target=_worker) for _ in range(8)]
    for thread in threads:
        thread.start()
    for thread in threads:
        thread.join()

    assert calls == ["same"]
    assert len(results) == 8
    assert all(r is results[0] for r in results)


def test_invalidate_drops_every_entry(make_device) -> None:
    device = make_device(functions={"switch_led": {"type": "Boolean"}})
    catalog = CapabilityCatalog()
    before = catalog.functions(device)

    catalog.invalidate()

    assert len(catalog) == 0
    assert catalog.functions(device) is not before
    assert catalog.functions(device) == before


def test_get_domain_falls_back_to_defaults(make_device) -> None:
    device = make_device(functions={"switch_led": {"type": "Boolean"}})
    catalog = CapabilityCatalog()

    assert catalog.get_domain(device, "switch_led").kind is ValueKind.BOOLEAN
    assert catalog.get_domain(device, "bright_value") is DEFAULT_SPECS["bright_value"]
    assert catalog.get_domain(device, "not_a_code") is None


def test_status_set_overrides_functions_in_merged_view(make_device) -> None:
    device = make_device(
        functions={"temp_value": {"type": "Integer", "min": 0, "max": 100}},
        status={"temp_value": {"type": "Integer", "min": 0, "max": 255}},
    )
    catalog = CapabilityCatalog()

    assert catalog.get_domain(device, "temp_value").max == 255


def test_status_domains_fall_back_to_functions(make_device) -> None:
    device = make_device(functions={"switch": {"type": "Boolean"}})
    catalog = CapabilityCatalog()

    assert "switch" in catalog.status_domains(device)


def test_parse_json_is_memoized() -> None:
    catalog = CapabilityCatalog()
    text = '{"h":120,"s":1000,"v":1000}'

    assert catalog.parse_json(text) is catalog.parse_json(text)
    assert catalog.parse_json(text) == {"h": 120, "s": 1000, "v": 1000}


def test_serialize_domains_is_order_independent() -> None:
    assert serialize_domains({"b": {"type": "Boolean"}, "a": {}}) == serialize_domains({"a": {}, "b": {"type": "Boolean"}})
