import pytest

from propshard.core.config import load_manager_config, parse_manager_config
from propshard.core.errors import ConfigurationError
from propshard.core.models import ShardType
from propshard.sharding.strategy import new_shard_strategy

MANAGER_YAML = """\
manager:
  podApplication: flytepropeller-worker
  podNamespace: flyte-system
  shard:
    type: namespace
    namespaceReplicas:
      - namespaces: [ns-a]
      - namespaces: [ns-b, ns-c]
"""


def write(tmp_path, text):
    path = tmp_path / "config.yaml"
    path.write_text(text)
    return path


def test_loads_manager_block(tmp_path):
    config = load_manager_config(write(tmp_path, MANAGER_YAML))
    assert config.pod_application == "flytepropeller-worker"
    assert config.pod_namespace == "flyte-system"
    assert config.binary_name == "flytepropeller"
    assert config.shard.type == ShardType.NAMESPACE
    assert [r.namespaces for r in config.shard.namespace_replicas] == [["ns-a"], ["ns-b", "ns-c"]]


def test_accepts_bare_shard_document(tmp_path):
    config = load_manager_config(write(tmp_path, "shard:\n  type: consistent-hashing\n  podCount: 4\n"))
    assert config.shard.type == ShardType.CONSISTENT_HASHING
    assert config.shard.pod_count == 4
    assert config.pod_application == "flytepropeller"


def test_unknown_type_reaches_factory():
    config = parse_manager_config({"shard": {"type": "bogus"}})
    assert config.shard.type == "bogus"
    with pytest.raises(ConfigurationError, match="'bogus' does not exist"):
        new_shard_strategy(config.shard)


@pytest.mark.parametrize("value", ["four", 4.5, True])
def test_pod_count_must_be_an_integer(value):
    with pytest.raises(ConfigurationError, match="podCount' must be an integer"):
        parse_manager_config({"shard": {"type": "consistent-hashing", "podCount": value}})


def test_namespaces_must_be_a_list():
    with pytest.raises(ConfigurationError, match="must be a list"):
        parse_manager_config({"shard": {"type": "namespace", "namespaceReplicas": [{"namespaces": "ns-a"}]}})


def test_missing_shard_block():
    with pytest.raises(ConfigurationError, match="missing the 'shard' block"):
        parse_manager_config({"manager": {"podNamespace": "flyte"}})


def test_invalid_yaml_is_a_configuration_error(tmp_path):
    with pytest.raises(ConfigurationError, match="not valid YAML"):
        load_manager_config(write(tmp_path, "shard: [unclosed\n"))


def test_missing_file_is_a_configuration_error(tmp_path):
    with pytest.raises(ConfigurationError, match="unable to read"):
        load_manager_config(tmp_path / "absent.yaml")
