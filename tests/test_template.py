"""Tests for the template library."""

from dataclasses import dataclass

import pytest

from cluster_assets.exceptions import BindingError
from cluster_assets.template import TemplateBinder, add, bind, indent


@dataclass(frozen=True)
class Values:
    """Example record of values to bind."""

    name: str
    cert: str
    hostnames: list[str]


@dataclass(frozen=True)
class OptionalValues:
    """Example record with a value that may be missing."""

    name: str | None


VALUES = Values(
    name="etcd",
    cert="-----BEGIN CERTIFICATE-----\nabc\n-----END CERTIFICATE-----\n",
    hostnames=["etcd-0", "etcd-1"],
)


def test_indent() -> None:
    """Test indenting every line after the first."""
    assert indent("a\nb", 2) == "a\n  b"
    assert indent("a", 4) == "a"
    assert indent("a\n", 1) == "a\n "


def test_add() -> None:
    """Test adding integers."""
    assert add(0, 1) == 1
    assert add(2, 3) == 5


def test_bind_values() -> None:
    """Test substituting record fields into a template."""
    body = "name: {{ name }}\n"
    assert bind(body, VALUES) == b"name: etcd\n"
    assert bind(body.encode(), VALUES) == b"name: etcd\n"


def test_bind_indent_filter() -> None:
    """Test embedding multi-line text in an indented yaml block."""
    body = "data:\n  ca.crt: |\n    {{ cert | indent(4) }}\n"
    assert bind(body, VALUES) == (
        b"data:\n"
        b"  ca.crt: |\n"
        b"    -----BEGIN CERTIFICATE-----\n"
        b"    abc\n"
        b"    -----END CERTIFICATE-----\n"
        b"    \n"
    )


def test_bind_loop_with_add() -> None:
    """Test iterating over a sequence field using the add helper."""
    body = (
        "hosts:\n"
        "{%- for hostname in hostnames %}\n"
        "- {{ hostname }}: {{ add(loop.index0, 1) }}\n"
        "{%- endfor %}\n"
    )
    assert bind(body, VALUES) == b"hosts:\n- etcd-0: 1\n- etcd-1: 2\n"


def test_bind_deterministic() -> None:
    """Test the same record and body always produce the same bytes."""
    binder = TemplateBinder(VALUES)
    body = "{{ name }} {{ hostnames | join(',') }}"
    assert binder.bind(body) == binder.bind(body) == bind(body, VALUES)


def test_unresolved_placeholder() -> None:
    """Test a placeholder that is not a record field fails the bind."""
    with pytest.raises(BindingError, match="Unresolved value in template pods.yaml"):
        bind("name: {{ unknown }}", VALUES, name="pods.yaml")


def test_malformed_template() -> None:
    """Test a syntax error reports the template and line."""
    with pytest.raises(
        BindingError, match="Malformed template broken.yaml on line 2"
    ):
        bind("first: ok\nsecond: {% endfor %}\n", VALUES, name="broken.yaml")


def test_missing_value() -> None:
    """Test a record with an unset field can't be bound."""
    with pytest.raises(BindingError, match="missing values for \\['name'\\]"):
        TemplateBinder(OptionalValues(name=None))


def test_not_a_record() -> None:
    """Test only dataclass instances are accepted as records."""
    with pytest.raises(BindingError, match="must be a dataclass instance"):
        TemplateBinder({"name": "etcd"})
    with pytest.raises(BindingError, match="must be a dataclass instance"):
        TemplateBinder(Values)


def test_invalid_encoding() -> None:
    """Test a body that is not utf-8 fails the bind."""
    with pytest.raises(BindingError, match="not valid utf-8"):
        bind(b"\xff\xfe", VALUES, name="binary")
