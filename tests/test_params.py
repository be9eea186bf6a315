import pytest

from cshell.params import (
    PARAMID_CRYPTO_KEY_PUBLIC,
    PARAMID_CRYPTO_KEY_REMOTE,
    PARAMID_CSP_DBG_BUFFER_OUT,
    PARAMID_CSP_DBG_ERRNO,
    PARAMID_CSP_RTABLE,
    PARAMID_SERIAL0,
    Param,
    ParamMode,
    ParamRegistry,
    ParamType,
    default_registry,
    serial_get,
    serial_init,
)


def test_find_crypto_key_public():
    param = default_registry().find_id(0, PARAMID_CRYPTO_KEY_PUBLIC)
    assert param.name == "crypto_key_public"
    assert param.array_size == 32
    assert param.vaddr == 100
    assert param.value == bytes(32)


def test_remote_key_is_configurable():
    param = default_registry().find_id(0, PARAMID_CRYPTO_KEY_REMOTE)
    assert ParamMode.CONF in param.mode
    assert ParamMode.READONLY not in param.mode


def test_debug_params_error_counter_flags():
    registry = default_registry()
    assert ParamMode.ERRCNT in registry.find_id(0, PARAMID_CSP_DBG_BUFFER_OUT).mode
    assert ParamMode.ERRCNT not in registry.find_id(0, PARAMID_CSP_DBG_ERRNO).mode


def test_find_by_name():
    registry = default_registry()
    param = registry.find_name(0, "csp_rtable")
    assert param.id == PARAMID_CSP_RTABLE
    assert param.type is ParamType.STRING
    assert registry.find_name(0, "missing") is None
    assert registry.find_name(5, "csp_rtable") is None


def test_iteration_yields_each_param_once():
    registry = default_registry()
    ids = [(p.node, p.id) for p in registry]
    assert len(ids) == len(set(ids)) == len(registry)


def test_duplicate_add_rejected():
    registry = ParamRegistry()
    registry.add(Param(1, "a", ParamType.UINT8))
    with pytest.raises(ValueError):
        registry.add(Param(1, "b", ParamType.UINT8))


def test_same_id_on_other_node_allowed():
    registry = ParamRegistry()
    registry.add(Param(1, "a", ParamType.UINT8, node=1))
    registry.add(Param(1, "a", ParamType.UINT8, node=2))
    assert registry.find_id(2, 1).node == 2


def test_serial_round_trip():
    value = serial_init()
    assert serial_get() == value
    assert 0 <= value < 2**31
    assert default_registry().find_id(0, PARAMID_SERIAL0).value == value