"""Tests for validator module rendering."""

from types import SimpleNamespace

import pytest

from vgen.compiler.rules import MESSAGES
from vgen.errors import VgenError
from vgen.generator.emitter import EMAIL_PATTERN, CodeEmitter, render_message, snake_case
from vgen.models import (
    CheckKind,
    CompiledField,
    CompiledStruct,
    NoOpMarker,
    ValidationFragment,
)


def _fragment(field, check, expected=None, struct="User", rule="rule"):
    return ValidationFragment(struct, field, rule, check, MESSAGES[check], expected)


@pytest.fixture
def user_struct():
    return CompiledStruct(name="User", fields=[
        CompiledField("name", [
            _fragment("name", CheckKind.NOT_EMPTY, rule="required"),
            _fragment("name", CheckKind.MIN_LENGTH, 2, rule="min"),
        ]),
        CompiledField("status", [
            _fragment("status", CheckKind.ONE_OF, ("active", "pending", "disabled"), rule="in"),
        ]),
        CompiledField("tags", [
            NoOpMarker("User", "tags", "required", "list[str]"),
        ]),
    ])


class TestSnakeCase:
    """Test function name derivation."""

    @pytest.mark.parametrize("name,expected", [
        ("User", "user"),
        ("UserProfile", "user_profile"),
        ("HTTPRequest", "http_request"),
        ("Address2Line", "address2_line"),
        ("already_snake", "already_snake"),
    ])
    def test_snake_case(self, name, expected):
        assert snake_case(name) == expected


class TestRenderMessage:
    """Test message templates become Python expressions."""

    def test_static_message(self):
        fragment = _fragment("name", CheckKind.NOT_EMPTY)
        assert render_message(fragment, None) == "'User: field name is required'"

    def test_runtime_value(self):
        fragment = _fragment("name", CheckKind.MIN_LENGTH, 2)
        assert render_message(fragment, "len(obj.name)") == (
            "'User: field name length must be at least 2, got %s' % (len(obj.name),)"
        )

    def test_percent_in_allow_list_is_escaped(self, load_module):
        fragment = _fragment("rate", CheckKind.ONE_OF, ("5%", "10%"))
        expression = render_message(fragment, "value")
        namespace = load_module(f"value = 'x'\nmessage = {expression}\n")
        assert namespace["message"] == "User: field rate value 'x' is not in the allowed list [5%, 10%]"


class TestCodeEmitter:
    """Test module rendering."""

    def test_module_layout(self, user_struct):
        text = CodeEmitter().render([user_struct], "user.py")
        lines = text.splitlines()

        assert lines[0] == "# Code generated by vgen from user.py. DO NOT EDIT."
        assert f'EMAIL_PATTERN = re.compile(r"{EMAIL_PATTERN}")' in lines
        assert "_USER_STATUS_ALLOWED = frozenset(('active', 'pending', 'disabled'))" in lines
        assert "def validate_user(obj):" in lines
        assert "    # 'required' is not enforced for tags of type list[str]" in lines
        assert text.endswith("]\n")

    def test_checks_in_declared_order(self, user_struct):
        text = CodeEmitter().render([user_struct], "user.py")
        positions = [
            text.index("if obj.name == '':"),
            text.index("if len(obj.name) < 2:"),
            text.index("if obj.status not in _USER_STATUS_ALLOWED:"),
            text.index("# 'required' is not enforced"),
            text.index("return errs"),
        ]
        assert positions == sorted(positions)

    def test_rendered_module_runs(self, user_struct, load_module):
        namespace = load_module(CodeEmitter().render([user_struct], "user.py"))
        validate = namespace["validate_user"]

        assert validate(SimpleNamespace(name="Al", status="active", tags=[])) == []
        assert validate(SimpleNamespace(name="", status="archived", tags=None)) == [
            "User: field name is required",
            "User: field name length must be at least 2, got 0",
            "User: field status value 'archived' is not in the allowed list [active, pending, disabled]",
        ]
        assert namespace["__all__"] == ["is_email_valid", "validate_user"]

    def test_email_helper(self, load_module):
        namespace = load_module(CodeEmitter().render([], "empty.py"))
        is_email_valid = namespace["is_email_valid"]

        assert is_email_valid("a@b.co")
        assert is_email_valid("first.last+tag@sub.example.org")
        assert not is_email_valid("invalid-email")
        assert not is_email_valid("a@b.c")
        assert not is_email_valid("a@b.co\n")
        assert not is_email_valid(None)

    def test_function_prefix(self, user_struct):
        text = CodeEmitter(function_prefix="check_").render([user_struct], "user.py")
        assert "def check_user(obj):" in text

    def test_duplicate_allow_list_names(self, load_module):
        struct = CompiledStruct(name="Item", fields=[
            CompiledField("kind", [
                _fragment("kind", CheckKind.ONE_OF, ("a", "b"), struct="Item"),
                _fragment("kind", CheckKind.ONE_OF, ("a",), struct="Item"),
            ]),
        ])
        text = CodeEmitter().render([struct], "item.py")
        assert "_ITEM_KIND_ALLOWED = frozenset(('a', 'b'))" in text
        assert "_ITEM_KIND_ALLOWED_2 = frozenset(('a',))" in text

        validate = load_module(text)["validate_item"]
        assert len(validate(SimpleNamespace(kind="b"))) == 1

    def test_duplicate_function_names_rejected(self):
        structs = [CompiledStruct(name="UserInfo"), CompiledStruct(name="User_Info")]
        with pytest.raises(VgenError, match="duplicate validator name validate_user_info"):
            CodeEmitter().render(structs, "dup.py")

    @pytest.mark.parametrize("source_name", ["a\\N.py", 'q"""q.py', "two\nlines.py"])
    def test_unusual_source_names_compile(self, user_struct, load_module, source_name):
        text = CodeEmitter().render([user_struct], source_name)
        assert text.splitlines()[1] == '"""Validators generated by vgen."""'
        assert "validate_user" in load_module(text)

    def test_non_printable_source_name_is_escaped(self, user_struct):
        text = CodeEmitter().render([user_struct], "two\nlines.py")
        assert text.splitlines()[0] == "# Code generated by vgen from 'two\\nlines.py'. DO NOT EDIT."

    def test_render_is_deterministic(self, user_struct):
        emitter = CodeEmitter()
        assert emitter.render([user_struct], "user.py") == emitter.render([user_struct], "user.py")
