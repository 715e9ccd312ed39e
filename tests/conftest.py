"""Root conftest.py for test configuration.

Ensures local src/ directory takes priority over any installed packages, and
provides a small JCK-style corpus shared by the extraction tests.
"""

import sys
from pathlib import Path

import pytest

# Insert local src directory at the beginning of sys.path
_src_dir = Path(__file__).parent.parent / "src"
if str(_src_dir) not in sys.path:
    sys.path.insert(0, str(_src_dir))

# Force reimport of testcarve modules if already imported
for module_name in list(sys.modules.keys()):
    if module_name.startswith("testcarve"):
        del sys.modules[module_name]


def write_java(path: Path, package: str | None, body: str) -> Path:
    """Write a compilation unit, creating parent directories."""
    path.parent.mkdir(parents=True, exist_ok=True)
    header = f"package {package};\n\n" if package else ""
    path.write_text(header + body + "\n")
    return path


@pytest.fixture
def corpus(tmp_path: Path) -> Path:
    """A miniature corpus with one library of each kind and a set of tests.

    Layout::

        src/direct/pkg/DirectA.java                 package direct.pkg
        src/jck.something/jck/pkg/JckA.java          package jck.pkg
        src/tests/api/api_pkg/testslib/TestsA.java   package testspkg.api.pkg.testslib
        tests/api/api_pkg/test1/Test1.java           no imports
        tests/api/api_pkg/test2parent/test2/...      uses a package-mate in its parent
        tests/api/api_pkg/testDirecLib/...           imports direct.pkg.DirectA
        tests/api/api_pkg/testJckLib/...             imports jck.pkg.JckA
        tests/api/api_pkg/testTestLib/...            imports testspkg.api.pkg.testslib.TestsA
        tests/api/api_pkg/testKshDep/run.ksh         launcher naming two classes
        tests/api/api_pkg/htmlTestParent/...         page linking ../linked.txt
    """
    root = tmp_path / "corpus"
    src = root / "src"
    tests = root / "tests" / "api" / "api_pkg"

    write_java(src / "direct" / "pkg" / "DirectA.java", "direct.pkg", "public class DirectA {}")
    write_java(
        src / "jck.something" / "jck" / "pkg" / "JckA.java", "jck.pkg", "public class JckA {}"
    )
    write_java(
        src / "tests" / "api" / "api_pkg" / "testslib" / "TestsA.java",
        "testspkg.api.pkg.testslib",
        "public class TestsA {}",
    )

    write_java(tests / "test1" / "Test1.java", "testspkg.api.pkg.test1", "public class Test1 {}")
    write_java(
        tests / "test2parent" / "Helper2.java",
        "testspkg.api.pkg.test2parent",
        "public class Helper2 {}",
    )
    write_java(
        tests / "test2parent" / "test2" / "Test2.java",
        "testspkg.api.pkg.test2parent.test2",
        "import testspkg.api.pkg.test2parent.Helper2;\n"
        "public class Test2 { Helper2 h; }",
    )
    write_java(
        tests / "testDirecLib" / "TestDirect.java",
        "testspkg.api.pkg.testDirecLib",
        "import direct.pkg.DirectA;\npublic class TestDirect { DirectA a; }",
    )
    write_java(
        tests / "testJckLib" / "TestJck.java",
        "testspkg.api.pkg.testJckLib",
        "import jck.pkg.JckA;\npublic class TestJck { JckA a; }",
    )
    write_java(
        tests / "testTestLib" / "TestTests.java",
        "testspkg.api.pkg.testTestLib",
        "import testspkg.api.pkg.testslib.TestsA;\npublic class TestTests { TestsA a; }",
    )

    ksh_dir = tests / "testKshDep"
    ksh_dir.mkdir(parents=True)
    (ksh_dir / "run.ksh").write_text(
        "#!/bin/ksh\n"
        "echo starting\n"
        " bin/java -somearg=direct.pkg.DirectA -arg2 jck.pkg.JckA \n"
    )

    html_parent = tests / "htmlTestParent"
    html_dir = html_parent / "testHtml"
    html_dir.mkdir(parents=True)
    (html_parent / "linked.txt").write_text("linked\n")
    (html_dir / "test.html").write_text(
        "<!DOCTYPE HTML>\n<html>\n<head>\n</head>\n<body>\n"
        '<a href="../linked.txt">../linked.txt</a>\n'
        "</body>\n</html>\n"
    )
    return root


@pytest.fixture
def output_dir(tmp_path: Path) -> Path:
    out = tmp_path / "out"
    out.mkdir()
    return out
