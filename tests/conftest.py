import pytest
from ruamel.yaml import YAML

POD_TEMPLATE_YAML = """\
apiVersion: v1
kind: PodTemplate
metadata:
  name: flytepropeller-template
  namespace: flyte
template:
  metadata:
    labels:
      team: flyte
  spec:
    serviceAccountName: flytepropeller
    containers:
      - name: flytepropeller
        image: cr.flyte.org/flyteorg/flytepropeller:v1.0.0
        command:
          - flytepropeller
        args:
          - --config
          - /etc/flyte/config/*.yaml
      - name: log-shipper
        image: fluent/fluent-bit:2.1
        command:
          - /fluent-bit/bin/fluent-bit
"""


@pytest.fixture
def pod_spec():
    """A pod spec with one controller container and one sidecar."""
    return {
        "containers": [
            {
                "name": "flytepropeller",
                "command": ["flytepropeller"],
                "args": ["--config", "/etc/flyte/config/*.yaml"],
            },
            {"name": "sidecar", "command": ["envoy"], "args": []},
        ]
    }


@pytest.fixture
def template_doc():
    return YAML(typ='rt').load(POD_TEMPLATE_YAML)


@pytest.fixture
def template_file(tmp_path):
    path = tmp_path / "podtemplate.yaml"
    path.write_text(POD_TEMPLATE_YAML)
    return path
