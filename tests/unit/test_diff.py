# tests/unit/test_diff.py
import pytest
from ai_code_reviewer.review.diff import language_for_path, split_diff, whole_file_diff


SAMPLE_DIFF = """--- a/src/main.py
+++ b/src/main.py
@@ -11,4 +11,6 @@ def hello():
     print("hello")
+    print("world")
+    return True
 
 def goodbye():
     pass
--- /dev/null
+++ b/web/app.js
@@ -0,0 +1,2 @@
+console.log('x');
+export default {};
"""


@pytest.mark.unit
def test_split_diff_extracts_files():
    files = split_diff(SAMPLE_DIFF)

    assert [f.path for f in files] == ["src/main.py", "web/app.js"]
    assert files[0].is_new is False
    assert files[1].is_new is True


@pytest.mark.unit
def test_split_diff_extracts_added_lines():
    files = split_diff(SAMPLE_DIFF)

    assert 12 in files[0].added_lines  # print("world")
    assert 13 in files[0].added_lines  # return True
    assert files[1].added_lines == [1, 2]


@pytest.mark.unit
def test_split_diff_keeps_per_file_text():
    files = split_diff(SAMPLE_DIFF)

    assert "+    return True" in files[0].diff
    assert "console.log" not in files[0].diff
    assert "+console.log('x');" in files[1].diff


@pytest.mark.unit
def test_whole_file_diff():
    diff = whole_file_diff("src/util.py", "def f():\n    return 1")

    assert diff == "+++ src/util.py\n+def f():\n+    return 1"


@pytest.mark.unit
@pytest.mark.parametrize("path,language", [
    ("a.py", "python"),
    ("web/App.TSX", "typescript"),
    ("lib.rs", "rust"),
    ("Main.kt", "kotlin"),
    ("Makefile", "plaintext"),
])
def test_language_for_path(path, language):
    assert language_for_path(path) == language
