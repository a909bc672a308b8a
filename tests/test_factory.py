import pytest

from armature.definitions import (
    AliasDefinition,
    BuildDefinition,
    Definition,
    InstanceDefinition,
)
from armature.errors import InvalidConfigurationError
from armature.factory import definition_class_for, make_definition


class Widget:
    pass


class CallableRecord(dict):
    def __call__(self, container):
        return "built by record"


class TaggedAlias(AliasDefinition):
    kind = "tagged-alias"


def make_widget(container) -> Widget:
    return Widget()


def test_definition_is_returned_unchanged():
    definition = BuildDefinition(make_widget)

    assert make_definition(definition) is definition


def test_string_becomes_alias():
    definition = make_definition("database")

    assert isinstance(definition, AliasDefinition)
    assert definition.alias_of == "database"
    assert definition.shared is False


@pytest.mark.parametrize("func", [make_widget, Widget, lambda c: Widget()])
def test_callable_becomes_build(func):
    definition = make_definition(func)

    assert isinstance(definition, BuildDefinition)
    assert definition.func is func
    assert definition.shared is True


@pytest.mark.parametrize("value", [Widget(), 42, None, [1, 2], ("a",)])
def test_other_objects_become_instances(value):
    definition = make_definition(value)

    assert isinstance(definition, InstanceDefinition)
    assert definition.instance is value


def test_callable_mapping_is_treated_as_build():
    record = CallableRecord(instance="ignored")

    definition = make_definition(record)

    assert isinstance(definition, BuildDefinition)
    assert definition.func is record


@pytest.mark.parametrize(
    "record, expected_class",
    [
        ({"func": make_widget}, BuildDefinition),
        ({"aliasOf": "widget"}, AliasDefinition),
        ({"alias_of": "widget"}, AliasDefinition),
        ({"instance": None}, InstanceDefinition),
        ({"func": make_widget, "aliasOf": "widget"}, BuildDefinition),
        ({"func": make_widget, "instance": Widget()}, BuildDefinition),
        ({"aliasOf": "widget", "instance": Widget()}, AliasDefinition),
    ],
)
def test_records_are_recognized_in_priority_order(record, expected_class):
    assert type(make_definition(record)) is expected_class


def test_record_shared_flag_is_applied():
    assert make_definition({"func": make_widget, "shared": False}).shared is False
    assert make_definition({"aliasOf": "widget", "shared": True}).shared is True


def test_instance_record_cannot_be_non_shared():
    with pytest.raises(InvalidConfigurationError, match="non-shared"):
        make_definition({"instance": Widget(), "shared": False})


@pytest.mark.parametrize(
    "definition_class, expected_class",
    [
        ("alias", AliasDefinition),
        (AliasDefinition, AliasDefinition),
        (TaggedAlias, TaggedAlias),
    ],
)
def test_definition_class_bypasses_inference(definition_class, expected_class):
    record = {"definitionClass": definition_class, "aliasOf": "widget", "func": make_widget}

    definition = make_definition(record)

    assert type(definition) is expected_class
    assert definition.alias_of == "widget"


def test_definition_class_still_requires_its_items():
    with pytest.raises(InvalidConfigurationError, match="Missing required item 'func'"):
        make_definition({"definitionClass": "build", "aliasOf": "widget"})


@pytest.mark.parametrize("definition_class", ["singleton", Widget, 42, Definition])
def test_unknown_definition_class_raises(definition_class):
    with pytest.raises(InvalidConfigurationError, match="Unknown definitionClass"):
        make_definition({"definitionClass": definition_class})


def test_definition_class_for_accepts_custom_subclasses():
    assert definition_class_for(TaggedAlias) is TaggedAlias
    assert issubclass(definition_class_for("instance"), Definition)


@pytest.mark.parametrize("record", [{}, {"shared": True}])
def test_unrecognized_record_raises(record):
    with pytest.raises(InvalidConfigurationError, match="Invalid configuration"):
        make_definition(record)
