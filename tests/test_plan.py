# tests/test_plan.py
from pathlib import Path

import pytest

from chore.command import Command
from chore.exceptions import (
    ConfigValidationError,
    DependencyCycleError,
    InterpolationError,
    OptionReferenceError,
    OptionValueError,
    TaskNotFoundError,
)
from chore.plan import build_plan


def test_pre_dependency_runs_first(make_config):
    config = make_config(
        """
        tasks:
          build:
            pre: [clean]
            run: [go build ./...]
          clean:
            run: [rm -rf dist]
        """
    )

    plan = build_plan(config, "build", environ={})

    assert plan.names == ["clean", "build"]
    assert plan[1].run == (Command(do="go build ./..."),)
    assert plan[0].requested_by == "build"
    assert plan[1].requested_by is None


def test_pre_then_task_then_post(make_config):
    config = make_config(
        """
        tasks:
          a: {pre: [b], post: [c], run: echo a}
          b: {pre: [d]}
          c: {post: [e]}
          d: {}
          e: {}
        """
    )

    assert build_plan(config, "a", environ={}).names == ["d", "b", "a", "c", "e"]


def test_shared_dependency_is_placed_once(make_config):
    config = make_config(
        """
        tasks:
          app: {pre: [lib, tools]}
          lib: {pre: [fetch]}
          tools: {pre: [fetch]}
          fetch: {}
        """
    )

    plan = build_plan(config, "app", environ={})

    assert plan.names == ["fetch", "lib", "tools", "app"]
    assert [i.index for i in plan] == [0, 1, 2, 3]


def test_different_overrides_create_distinct_instances(make_config):
    config = make_config(
        """
        tasks:
          greet:
            options:
              who: {default: world}
            run: echo hello ${who}
          all:
            pre:
              - {task: greet, options: {who: alice}}
              - {task: greet, options: {who: bob}}
              - {task: greet, options: {who: alice}}
              - greet
        """
    )

    plan = build_plan(config, "all", environ={})

    assert plan.names == ["greet", "greet", "greet", "all"]
    assert [i.run[0].do for i in plan.instances[:3]] == [
        "echo hello alice",
        "echo hello bob",
        "echo hello world",
    ]
    assert plan[0].describe() == "greet(who=alice)"


def test_dependency_overrides_interpolate_parent_options(make_config):
    config = make_config(
        """
        tasks:
          deploy:
            options:
              env: {}
            run: ./deploy.sh ${env}
          release:
            options:
              stage: {default: qa}
            pre: [{task: deploy, options: {env: "${stage}-eu"}}]
        """
    )

    plan = build_plan(config, "release", {"stage": "prod"}, environ={})

    assert plan[0].values["env"] == "prod-eu"
    assert plan[0].run[0].do == "./deploy.sh prod-eu"


def test_direct_cycle_is_rejected(make_config):
    config = make_config(
        """
        tasks:
          A: {pre: [B]}
          B: {pre: [A]}
        """
    )

    with pytest.raises(DependencyCycleError) as excinfo:
        build_plan(config, "A", environ={})

    assert excinfo.value.cycle_path == ["A", "B", "A"]
    assert "A -> B -> A" in str(excinfo.value)


def test_self_dependency_is_a_cycle(make_config):
    config = make_config("tasks: {loop: {pre: [loop]}}")

    with pytest.raises(DependencyCycleError, match="loop -> loop"):
        build_plan(config, "loop", environ={})


def test_cycle_through_post_edge(make_config):
    config = make_config(
        """
        tasks:
          a: {post: [b]}
          b: {pre: [c]}
          c: {pre: [a]}
        """
    )

    with pytest.raises(DependencyCycleError) as excinfo:
        build_plan(config, "a", environ={})

    assert excinfo.value.cycle_path == ["a", "b", "c", "a"]


def test_cycle_with_changing_overrides_still_detected(make_config):
    config = make_config(
        """
        tasks:
          count:
            options:
              n: {default: "0"}
            pre: [{task: count, options: {n: "${n}1"}}]
        """
    )

    with pytest.raises(DependencyCycleError):
        build_plan(config, "count", environ={})


def test_unknown_target(make_config):
    config = make_config("tasks: {build: {}}")

    with pytest.raises(TaskNotFoundError, match="unknown task 'deploy'"):
        build_plan(config, "deploy", environ={})


def test_self_referential_default_rejected_before_running(make_config):
    with pytest.raises(OptionReferenceError):
        config = make_config(
            """
            tasks:
              t:
                options:
                  A: {default: "${A}"}
                run: echo ${A}
            """
        )
        build_plan(config, "t", environ={})


def test_unresolved_placeholder_in_command(make_config):
    config = make_config(
        """
        tasks:
          build:
            options:
              out: {default: dist}
            run: go build -o ${outdir}
        """
    )

    with pytest.raises(InterpolationError) as excinfo:
        build_plan(config, "build", environ={})

    assert excinfo.value.task_name == "build"
    assert excinfo.value.placeholder == "outdir"


def test_unresolved_placeholder_in_dependency_aborts_whole_plan(make_config):
    config = make_config(
        """
        tasks:
          ok: {run: echo ok}
          broken: {run: echo ${nope}}
          all: {pre: [ok, broken]}
        """
    )

    with pytest.raises(ConfigValidationError):
        build_plan(config, "all", environ={})


def test_option_resolution_precedence(make_config):
    config = make_config(
        """
        tasks:
          build:
            options:
              mode:
                default: debug
                environment: BUILD_MODE
            run: make ${mode}
        """
    )

    assert build_plan(config, "build", environ={})[0].values["mode"] == "debug"
    assert build_plan(config, "build", environ={"BUILD_MODE": "fast"})[0].values["mode"] == "fast"
    plan = build_plan(config, "build", {"mode": "release"}, environ={"BUILD_MODE": "fast"})
    assert plan[0].run[0].do == "make release"


def test_global_options_resolve_before_task_options(make_config):
    config = make_config(
        """
        options:
          env: {default: dev}
        tasks:
          build:
            options:
              target: {default: "${env}-build"}
            pre: [lint]
            run: echo ${target}
          lint:
            run: lint --env ${env}
        """
    )

    plan = build_plan(config, "build", {"env": "prod"}, environ={})

    assert list(plan[1].values) == ["env", "target"]
    assert plan[1].values["target"] == "prod-build"
    assert plan[0].run[0].do == "lint --env prod"


def test_cli_flags_for_task_options_only_bind_the_target(make_config):
    config = make_config(
        """
        tasks:
          test:
            options:
              verbose: {type: bool}
            run: pytest ${verbose}
          ci:
            options:
              verbose: {type: bool}
            pre: [test]
        """
    )

    plan = build_plan(config, "ci", {"verbose": "yes"}, environ={})

    assert plan[0].values["verbose"] == "false"
    assert plan[1].values["verbose"] == "true"


def test_unknown_and_private_flags(make_config):
    config = make_config(
        """
        tasks:
          build:
            options:
              secret: {private: true, default: s}
        """
    )

    with pytest.raises(OptionValueError, match="unknown option 'nope'"):
        build_plan(config, "build", {"nope": "1"}, environ={})
    with pytest.raises(OptionValueError, match="private"):
        build_plan(config, "build", {"secret": "x"}, environ={})


def test_private_task_cannot_be_target(make_config):
    config = make_config("tasks: {helper: {private: true}}")

    with pytest.raises(OptionValueError, match="private"):
        build_plan(config, "helper", environ={})
    assert build_plan(config, "helper", environ={}, allow_private=True).names == ["helper"]


def test_builtins_and_dir_interpolation(make_config, tmp_path: Path):
    config = make_config(
        """
        options:
          sub: {default: pkg}
        tasks:
          where:
            run:
              do: echo ${chore.task} ${chore.cwd}
              dir: ${chore.root}/${sub}
        """
    )

    plan = build_plan(config, "where", environ={}, cwd="/somewhere")
    command = plan[0].run[0]

    assert command.do == "echo where /somewhere"
    assert command.print == "echo where /somewhere"
    assert command.dir == f"{tmp_path.resolve()}/pkg"


def test_conditional_default_sees_platform(make_config):
    config = make_config(
        """
        tasks:
          open:
            options:
              opener:
                default:
                  - {when: {os: darwin}, value: open}
                  - {value: xdg-open}
            run: ${opener} index.html
        """
    )

    assert build_plan(config, "open", environ={}, platform="darwin")[0].run[0].do == "open index.html"
    assert build_plan(config, "open", environ={}, platform="linux")[0].run[0].do == "xdg-open index.html"


def test_plan_captures_condition_context(make_config):
    config = make_config(
        """
        tasks:
          t:
            options:
              mode: {default: fast}
        """
    )

    plan = build_plan(config, "t", environ={"X": "1"}, platform="linux")
    ctx = plan[0].context

    assert ctx.values["mode"] == "fast"
    assert ctx.environ["X"] == "1"
    assert ctx.platform == "linux"
