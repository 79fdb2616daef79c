from formbuilder.builder import fields as field_ops
from formbuilder.schemas import FormField, FormStep


def make_field(field_id, order, step_id=1, **extra):
    return FormField(id=field_id, type="text", label=field_id, step_id=step_id, order=order, **extra)


def test_create_field_appends_to_step_and_seeds_choice_options():
    existing = [make_field("a", 1), make_field("b", 2), make_field("c", 1, step_id=2)]

    text_field = field_ops.create_field("text", 1, existing)
    select_field = field_ops.create_field("select", 2, existing)

    assert text_field.order == 3
    assert text_field.options is None
    assert select_field.order == 2
    assert [o.value for o in select_field.options] == ["option1", "option2"]
    assert text_field.id != select_field.id


def test_create_field_in_empty_step_starts_at_one():
    assert field_ops.create_field("radio", 4, []).order == 1


def test_create_step_uses_next_free_id():
    steps = [FormStep(id=1, title="A", order=1), FormStep(id=3, title="B", order=2)]

    step = field_ops.create_step(steps)

    assert step.id == 4
    assert step.order == 3
    assert step.title == "Step 4"


def test_slugify_option_label():
    assert field_ops.slugify_option_label("Very  Good\tChoice") == "very_good_choice"
    assert field_ops.slugify_option_label("Yes") == "yes"


def test_unique_option_value_adds_suffix_on_collision():
    assert field_ops.unique_option_value("Yes", ["yes", "yes_2"]) == "yes_3"
    assert field_ops.unique_option_value("No", ["yes"]) == "no"


def test_duplicate_field_shifts_later_fields():
    fields = [make_field("a", 1), make_field("b", 2), make_field("c", 3), make_field("x", 2, step_id=2)]

    new_fields, copy = field_ops.duplicate_field(fields, fields[0])

    by_id = {f.id: f for f in new_fields}
    assert copy.label == "a (Copy)"
    assert copy.order == 2
    assert by_id["b"].order == 3
    assert by_id["c"].order == 4
    # anderer Schritt bleibt unberührt
    assert by_id["x"].order == 2
    orders = [f.order for f in field_ops.step_fields(new_fields, 1)]
    assert orders == sorted(set(orders))
