"""Tests for perlstrict.checks."""

from __future__ import annotations

import io
from pathlib import Path
from typing import List

import pytest

from perlstrict.checks import StrictChecker
from perlstrict.config import StrictConfig
from perlstrict.reporting import TapReporter
from tests._fixtures.perl_tree import FakeRunner, completed


def _syntax_ok_runner(args: List[str]):
    if "-c" in args:
        return completed(args, f"{args[-1]} syntax OK\n")
    return completed(args)


def _checker(
    perl_tree,
    tap: TapReporter,
    runner: FakeRunner | None = None,
    **overrides,
) -> StrictChecker:
    config = StrictConfig(root=perl_tree.path(), can_use_warnings=True)
    for key, value in overrides.items():
        setattr(config, key, value)
    return StrictChecker(
        config,
        reporter=tap,
        runner=runner or FakeRunner(_syntax_ok_runner),
        script_path="",
    )


def _out(tap: TapReporter) -> str:
    return tap.stream.getvalue()  # type: ignore[attr-defined]


def _diag(tap: TapReporter) -> str:
    return tap.diag_stream.getvalue()  # type: ignore[attr-defined]


def test_strict_ok_passes_when_pragma_precedes_code(perl_tree, tap) -> None:
    perl_tree.write({"lib/Foo.pm": "package Foo;\nuse strict;\n1;\n"})
    path = perl_tree.file("lib/Foo.pm")

    assert _checker(perl_tree, tap).strict_ok(path) is True
    assert _out(tap) == f"ok 1 - use strict   {path}\n"


def test_strict_ok_fails_when_pragma_only_in_pod(perl_tree, tap) -> None:
    perl_tree.write({"lib/Foo.pm": "package Foo;\n=pod\nuse strict;\n=cut\n1;\n"})
    path = perl_tree.file("lib/Foo.pm")

    assert _checker(perl_tree, tap).strict_ok(path, "strictness") is False
    assert _out(tap) == "not ok 1 - strictness\n"


def test_strict_ok_resolves_module_names(perl_tree, tap) -> None:
    perl_tree.write({"lib/My/Module.pm": "package My::Module;\nuse strict;\n1;\n"})

    assert _checker(perl_tree, tap).strict_ok("My::Module") is True
    assert _out(tap) == "ok 1 - use strict   My::Module\n"


def test_strict_ok_reports_missing_module(perl_tree, tap) -> None:
    assert _checker(perl_tree, tap).strict_ok("No::Such") is False
    assert "Could not open No::Such" in _diag(tap)


def test_syntax_ok_runs_perl_with_include_dirs(perl_tree, tap) -> None:
    perl_tree.write({"lib/Foo.pm": "package Foo;\n1;\n"})
    runner = FakeRunner(_syntax_ok_runner)
    path = perl_tree.file("lib/Foo.pm")

    assert _checker(perl_tree, tap, runner, perl="/opt/perl").syntax_ok(path) is True

    command = runner.commands[0]
    assert command[0] == "/opt/perl"
    assert command[1:3] == ["-I", str(perl_tree.path() / "lib")]
    assert command[-2:] == ["-c", path]
    assert _out(tap) == f"ok 1 - Syntax check {path}\n"


def test_syntax_ok_attaches_perl_output_on_failure(perl_tree, tap) -> None:
    perl_tree.write({"lib/Foo.pm": "package Foo;\nsub {\n"})
    runner = FakeRunner(lambda args: completed(args, "Missing right curly at line 2.\n", 255))

    assert _checker(perl_tree, tap, runner).syntax_ok(perl_tree.file("lib/Foo.pm")) is False
    assert "# Missing right curly at line 2." in _diag(tap)


def test_syntax_ok_rejects_missing_file_without_running_perl(perl_tree, tap) -> None:
    runner = FakeRunner(_syntax_ok_runner)
    path = perl_tree.file("lib/Missing.pm")

    assert _checker(perl_tree, tap, runner).syntax_ok(path) is False
    assert runner.calls == []
    assert f"File {path} not found or not readable" in _diag(tap)


def test_syntax_ok_rejects_non_perl_file(perl_tree, tap) -> None:
    perl_tree.write({"README": "hello\n"})
    runner = FakeRunner(_syntax_ok_runner)
    path = perl_tree.file("README")

    assert _checker(perl_tree, tap, runner).syntax_ok(path) is False
    assert runner.calls == []
    assert f"{path} is not a perl module or a perl script" in _diag(tap)


def test_warnings_ok_accepts_shebang_flag(perl_tree, tap) -> None:
    perl_tree.write({"bin/tool": "#!/usr/bin/perl -w\nprint 1;\n"})

    assert _checker(perl_tree, tap).warnings_ok(perl_tree.file("bin/tool")) is True


def test_warnings_ok_requires_pragma_in_modules(perl_tree, tap) -> None:
    perl_tree.write(
        {
            "lib/Good.pm": "package Good;\nuse warnings;\n1;\n",
            "lib/Bad.pm": "package Bad;\nuse strict;\n1;\n",
        }
    )
    checker = _checker(perl_tree, tap)

    assert checker.warnings_ok(perl_tree.file("lib/Good.pm")) is True
    assert checker.warnings_ok(perl_tree.file("lib/Bad.pm")) is False


def test_warnings_ok_skips_modules_on_old_perl(perl_tree, tap) -> None:
    perl_tree.write({"lib/Foo.pm": "package Foo;\nuse warnings;\n1;\n"})
    checker = _checker(perl_tree, tap, can_use_warnings=False)

    assert checker.warnings_ok(perl_tree.file("lib/Foo.pm")) is None
    summary = checker.finish()

    assert _out(tap).startswith("ok 1 # skip This version of perl does not have use warnings")
    assert summary.skipped == 1
    assert summary.ok


def test_warnings_ok_on_old_perl_still_checks_script_shebang(perl_tree, tap) -> None:
    perl_tree.write(
        {
            "bin/flag.pl": "#!/usr/bin/perl -w\n1;\n",
            "bin/body.pl": "#!/usr/bin/perl\nuse warnings;\n",
        }
    )
    checker = _checker(perl_tree, tap, can_use_warnings=False)

    assert checker.warnings_ok(perl_tree.file("bin/flag.pl")) is True
    assert checker.warnings_ok(perl_tree.file("bin/body.pl")) is False


def test_warnings_ok_runs_both_paths_for_module_scripts(perl_tree, tap) -> None:
    perl_tree.write(
        {
            "lib/Flag.pm": "#!/usr/bin/perl -w\npackage Flag;\n1;\n",
            "lib/Body.pm": "#!/usr/bin/perl\npackage Body;\nuse warnings;\n1;\n",
        }
    )
    checker = _checker(perl_tree, tap)

    assert checker.warnings_ok(perl_tree.file("lib/Flag.pm")) is True
    assert checker.warnings_ok(perl_tree.file("lib/Body.pm")) is True


def test_warnings_capability_is_probed_once(perl_tree, tap) -> None:
    perl_tree.write({"lib/A.pm": "use warnings;\n", "lib/B.pm": "use warnings;\n"})

    def respond(args: List[str]):
        if args[1:] == ["-e", "print $]"]:
            return completed(args, "5.004005")
        return completed(args)

    runner = FakeRunner(respond)
    checker = _checker(perl_tree, tap, runner, can_use_warnings=None)

    assert checker.warnings_ok(perl_tree.file("lib/A.pm")) is None
    assert checker.warnings_ok(perl_tree.file("lib/B.pm")) is None
    assert runner.commands == [["perl", "-e", "print $]"]]


def test_all_perl_files_ok_checks_syntax_before_strict(perl_tree, tap) -> None:
    perl_tree.write(
        {
            "lib/Foo.pm": "package Foo;\nuse strict;\n1;\n",
            "bin/run.pl": "#!/usr/bin/perl\nprint 1;\n",
            "README": "docs\n",
        }
    )
    foo = perl_tree.file("lib/Foo.pm")
    run = perl_tree.file("bin/run.pl")

    ok = _checker(perl_tree, tap).all_perl_files_ok(str(perl_tree.path()))

    assert ok is False
    assert _out(tap).splitlines() == [
        f"ok 1 - Syntax check {run}",
        f"not ok 2 - use strict   {run}",
        f"ok 3 - Syntax check {foo}",
        f"ok 4 - use strict   {foo}",
    ]


def test_all_perl_files_ok_honours_exclusions_and_toggles(perl_tree, tap) -> None:
    perl_tree.write(
        {
            "lib/Foo.pm": "package Foo;\nuse strict;\nuse warnings;\n1;\n",
            "inc/Module/Install.pm": "package Module::Install;\n1;\n",
        }
    )
    runner = FakeRunner(_syntax_ok_runner)
    checker = _checker(
        perl_tree,
        tap,
        runner,
        exclude=["inc/*"],
        test_syntax=False,
        test_warnings=True,
    )

    assert checker.all_perl_files_ok(str(perl_tree.path())) is True
    assert runner.calls == []
    foo = perl_tree.file("lib/Foo.pm")
    assert _out(tap).splitlines() == [
        f"ok 1 - use strict   {foo}",
        f"ok 2 - use warnings {foo}",
    ]


def test_all_cover_ok_drives_cover_and_returns_total(perl_tree, tap) -> None:
    perl_tree.write({"t/cover.t": "1;\n", "t/basic.t": "1;\n", "t/more.t": "1;\n"})

    def respond(args: List[str]):
        if args == ["cover"]:
            return completed(args, "Total   80.0  n/a  73.5\n")
        return completed(args)

    runner = FakeRunner(respond)
    config = StrictConfig(root=perl_tree.path())
    config.coverage.cover = "cover"
    checker = StrictChecker(
        config, reporter=tap, runner=runner, script_path=perl_tree.file("t/cover.t")
    )

    total = checker.all_cover_ok(80)

    assert total == pytest.approx(73.5)
    assert runner.commands == [
        ["cover", "-delete"],
        ["perl", "-MDevel::Cover", perl_tree.file("t/basic.t")],
        ["perl", "-MDevel::Cover", perl_tree.file("t/more.t")],
        ["cover"],
    ]
    lines = _out(tap).splitlines()
    assert lines[-1] == "not ok 4 - coverage = 73.5% >= 80%"
    assert not checker.finish().ok
    assert checker.last_coverage is not None
    assert checker.last_coverage.targets == [perl_tree.file("t/basic.t"), perl_tree.file("t/more.t")]


def test_all_cover_ok_uses_configured_threshold(perl_tree, tap) -> None:
    perl_tree.write({"t/basic.t": "1;\n"})

    def respond(args: List[str]):
        if args == ["cover"]:
            return completed(args, "Total   50.0\n")
        return completed(args)

    config = StrictConfig(root=perl_tree.path())
    config.coverage.cover = "cover"
    checker = StrictChecker(config, reporter=tap, runner=FakeRunner(respond), script_path="")

    assert checker.all_cover_ok(None, perl_tree.file("t")) == pytest.approx(50.0)
    assert _out(tap).splitlines()[-1] == "ok 3 - coverage = 50.0% >= 50%"


def test_all_cover_ok_skips_without_cover_binary(perl_tree, tap, monkeypatch) -> None:
    monkeypatch.setattr("perlstrict.tools.shutil.which", lambda name: None)
    runner = FakeRunner()
    checker = _checker(perl_tree, tap, runner)

    assert checker.all_cover_ok(50, str(perl_tree.path())) is None
    assert runner.calls == []
    assert _out(tap) == "ok 1 # skip Cover binary not found\n"


def test_cover_path_is_memoised(perl_tree, tap, monkeypatch) -> None:
    lookups: List[str] = []

    def which(name: str) -> str:
        lookups.append(name)
        return "/usr/bin/cover"

    monkeypatch.setattr("perlstrict.tools.shutil.which", which)
    checker = _checker(perl_tree, tap)

    assert checker.tools.cover_path() == "/usr/bin/cover"
    assert checker.tools.cover_path() == "/usr/bin/cover"
    assert lookups == ["cover"]


def test_checkers_do_not_share_counters(perl_tree) -> None:
    perl_tree.write({"lib/Foo.pm": "use strict;\n"})
    first = TapReporter(stream=io.StringIO(), diag_stream=io.StringIO())
    second = TapReporter(stream=io.StringIO(), diag_stream=io.StringIO())

    _checker(perl_tree, first).strict_ok(perl_tree.file("lib/Foo.pm"))
    _checker(perl_tree, second).strict_ok(perl_tree.file("lib/Foo.pm"))

    assert first.count == 1
    assert second.count == 1


def test_search_roots_are_relative_to_config_root(tmp_path: Path, tap) -> None:
    checker = StrictChecker(StrictConfig(root=tmp_path, include_dirs=["lib", "/abs/lib"]), reporter=tap)

    roots = checker.search_roots

    assert roots[:2] == [str(tmp_path / "lib"), "/abs/lib"]


def test_all_cover_ok_reports_out_of_range_threshold(perl_tree, tap) -> None:
    runner = FakeRunner()
    checker = _checker(perl_tree, tap, runner)

    assert checker.all_cover_ok(150, str(perl_tree.path())) is None

    assert runner.calls == []
    assert checker.last_coverage is None
    assert _out(tap) == "not ok 1 - coverage >= 150%\n"
    assert "between 0 and 100" in _diag(tap)
    assert not checker.finish().ok
