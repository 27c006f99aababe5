"""Tests for bind variable extraction and comparison."""

from sql_callsite_analyzer.sql_analysis.bind_vars import (
    BindVarSet,
    canonical_bind_var_name,
    compare_bind_vars,
    extract_referenced_bind_vars,
)


class TestBindVarSet:
    """Case-insensitive bind variable sets."""

    def test_names_are_prefixed(self):
        """Test that mapping keys without a colon get one."""
        assert canonical_bind_var_name("uid") == ":uid"
        assert canonical_bind_var_name(":uid") == ":uid"
        assert BindVarSet(["uid", ":name"]).names() == [":uid", ":name"]

    def test_membership_ignores_case(self):
        """Test that :Uid and :uid are the same variable."""
        bind_vars = BindVarSet([":Uid"])
        assert ":uid" in bind_vars
        assert "UID" in bind_vars
        assert len(bind_vars) == 1

    def test_last_spelling_is_kept(self):
        """Test that the last-seen spelling is displayed."""
        bind_vars = BindVarSet([":uid", ":name", ":UID"])
        assert bind_vars.names() == [":UID", ":name"]
        assert bind_vars.by_key() == {":uid": ":UID", ":name": ":name"}

    def test_equality_is_set_equality(self):
        """Test that order and casing do not affect equality."""
        assert BindVarSet([":a", ":B"]) == BindVarSet(["b", "A"])
        assert BindVarSet([":a"]) != BindVarSet([":a", ":b"])
        assert BindVarSet() == BindVarSet([])


class TestExtractReferencedBindVars:
    """Scanning SQL text for bind variables."""

    def test_extract_bind_vars(self):
        """Test finding bind variables in first-seen order."""
        sql = "SELECT a FROM t WHERE uid = :uid AND name = :name OR uid2 = :uid"
        assert extract_referenced_bind_vars(sql).names() == [":uid", ":name"]

    def test_string_literals_are_ignored(self):
        """Test that colons inside literals are not bind variables."""
        sql = "SELECT TO_CHAR(created, 'DD-MON-YYYY HH24:MI:SS') FROM t WHERE id = :id"
        assert extract_referenced_bind_vars(sql).names() == [":id"]

    def test_placeholders_are_ignored(self):
        """Test that templates do not hide or create bind variables."""
        sql = "SELECT {{pkey}}id FROM {{tkey}}t WHERE id = :id"
        assert extract_referenced_bind_vars(sql).names() == [":id"]

    def test_no_bind_vars(self):
        """Test SQL without bind variables."""
        assert len(extract_referenced_bind_vars("SELECT 1 FROM dual")) == 0
        assert len(extract_referenced_bind_vars("")) == 0


class TestCompareBindVars:
    """Diffing expected against supplied bind variables."""

    def test_missing_and_unexpected(self):
        """Test reporting both directions of a mismatch."""
        expected = BindVarSet([":uid", ":name"])
        actual = BindVarSet(["uid", "email"])

        diff = compare_bind_vars(expected, actual)
        assert diff.missing.names() == [":name"]
        assert diff.unexpected.names() == [":email"]
        assert not diff.is_empty

    def test_case_differences_match(self):
        """Test that :Uid in SQL matches uid supplied by the caller."""
        expected = extract_referenced_bind_vars("SELECT a FROM t WHERE uid = :Uid")
        actual = BindVarSet(["uid"])

        diff = compare_bind_vars(expected, actual)
        assert diff.is_empty

    def test_upper_case_sql_matches_lower_case_keys(self):
        """Test upper-case bind variables against lower-case keys."""
        expected = extract_referenced_bind_vars("SELECT A FROM T WHERE UID = :UID")
        diff = compare_bind_vars(expected, BindVarSet([":uid"]))
        assert diff.missing == BindVarSet()
        assert diff.unexpected == BindVarSet()

    def test_compare_with_itself_is_empty(self):
        """Test that a set compared with itself has no differences."""
        for names in ([], [":a"], [":a", ":B", ":c_1"]):
            bind_vars = BindVarSet(names)
            missing, unexpected = compare_bind_vars(bind_vars, bind_vars)
            assert missing == BindVarSet()
            assert unexpected == BindVarSet()

    def test_comparison_is_symmetric(self):
        """Test that swapping the roles swaps missing and unexpected."""
        a = BindVarSet([":uid", ":Name", ":x"])
        b = BindVarSet([":UID", ":email"])

        forward = compare_bind_vars(a, b)
        backward = compare_bind_vars(b, a)
        assert forward.missing == backward.unexpected
        assert forward.unexpected == backward.missing
        assert forward.missing.names() == backward.unexpected.names()

    def test_diagnostic_spelling_comes_from_each_side(self):
        """Test that each name is shown as its own side spelled it."""
        diff = compare_bind_vars(BindVarSet([":UserId"]), BindVarSet([":Email"]))
        assert diff.missing.names() == [":UserId"]
        assert diff.unexpected.names() == [":Email"]
