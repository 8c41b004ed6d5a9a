import pytest

from servosphere.schemas.user import UserConfig

pytestmark = pytest.mark.unit


def test_uppercase_keys_are_handled():
    raw = {
        "INPUT_DIR": "/data/trials",
        "METADATA_FILE": "/data/trial_ids.csv",
        "OUTPUT_DIR": "/tmp/servosphere_out",
        "WINDOW_SIZE": 10,
        "STOP_THRESHOLD": 1,
        "KEEP_STIMULI": [1, 2],
        "SPLIT_BY_STIMULUS": True,
        "TORTUOSITY_INVERSE": True,
        "WORKERS": 4,
        "LOG_LEVEL": "debug",
    }

    user = UserConfig.model_validate(raw)

    assert user.input_dir == "/data/trials"
    assert user.window_size == 10
    assert isinstance(user.stop_threshold, float) and user.stop_threshold == 1.0
    assert user.keep_stimuli == [1, 2]
    assert user.log_level == "DEBUG"


def test_lowercase_keys_are_handled():
    user = UserConfig.model_validate({"output_dir": "/tmp/out", "workers": 2})
    assert user.output_dir == "/tmp/out"
    assert user.workers == 2


def test_unknown_keys_are_ignored():
    raw = {"WINDOW_SIZE": 3, "UNKNOWN_LEGACY": 12345}
    user = UserConfig.model_validate(raw)

    assert user.window_size == 3
    assert not hasattr(user, "UNKNOWN_LEGACY")


def test_overrides_only_contain_given_sections():
    overrides = UserConfig(stop_threshold=0.2).to_internal_overrides()
    assert overrides == {"summary": {"stop_threshold": 0.2}}


def test_overrides_for_all_flat_fields():
    user = UserConfig.model_validate({
        "INPUT_DIR": "in", "OUTPUT_DIR": "out", "WINDOW_SIZE": 2,
        "KEEP_STIMULI": [1], "WORKERS": 3, "LOG_LEVEL": "WARNING",
    })
    overrides = user.to_internal_overrides()

    assert overrides["paths"] == {"input_dir": "in", "output_dir": "out"}
    assert overrides["aggregator"] == {"window_size": 2, "enabled": True}
    assert overrides["ingest"] == {"keep_stimuli": [1]}
    assert overrides["processing"] == {"workers": 3}
    assert overrides["logging"] == {"level": "WARNING"}


def test_nested_unknown_keys_rejected():
    from pydantic import ValidationError
    with pytest.raises(ValidationError):
        UserConfig.model_validate({"ingest": {"file_patern": "*.txt"}})
