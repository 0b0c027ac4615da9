# tests/test_examples.py
from pathlib import Path

import pytest

from chore import build_plan, load_config

EXAMPLES = Path(__file__).parent.parent / "examples"


@pytest.mark.parametrize(
    "path, target, expected",
    [
        ("basic/01_hello_world/chore.yml", "hello", ["hello"]),
        ("basic/02_toml_config/chore.toml", "build", ["clean", "build", "report"]),
        ("workflows/go_project/chore.yml", "integration", ["generate", "build", "integration"]),
        ("workflows/go_project/chore.yml", "test", ["generate", "test"]),
    ],
)
def test_example_configs_plan(path, target, expected):
    config = load_config(EXAMPLES / path)

    plan = build_plan(config, target, environ={}, platform="linux")

    assert plan.names == expected


def test_go_project_release_plan():
    config = load_config(EXAMPLES / "workflows/go_project/chore.yml")

    plan = build_plan(config, "release", {"version": "1.2.0", "env": "prod"}, environ={"CI": "true"})

    assert plan.names == ["generate", "test", "generate", "build", "release", "notify"]
    test = plan[1]
    assert test.run[0].do == "go test -coverprofile=coverage.out ./..."
    assert plan[3].values["output"] == f"{config.root}/bin/service-prod"
    assert plan[4].run[0].do == "git tag v1.2.0 && git push origin v1.2.0"
    assert plan[5].run[0].do == 'echo "released notify from ${USER}"'
