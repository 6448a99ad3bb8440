"""
Unit tests for menu parsing and item sanitizing.

Tests cover:
- JSON array input (and what falls through to line parsing)
- Comma/tab separated lines, comments, CRLF endings
- Field coercion and the name/price/calories validity filter
- Diet filter and the parsed-items table
"""
import json
import math

import pytest

from menu_parser import (
    MenuItem,
    filter_by_diet,
    format_items,
    items_frame,
    parse_menu,
    sanitize_items,
    split_tags,
)


# ============================================================================
# split_tags
# ============================================================================

class TestSplitTags:
    def test_pipe_delimited(self):
        assert split_tags("Vegan| Gluten-Free |") == ["vegan", "gluten-free"]

    def test_missing(self):
        assert split_tags(None) == []


# ============================================================================
# JSON input
# ============================================================================

class TestJsonMenu:
    def test_array_of_items(self):
        text = json.dumps([
            {"name": "Soup", "price": "4.5", "calories": 300, "protein": 12,
             "satFat": 1.5, "tags": ["Vegan", "GF"]},
        ])
        items = parse_menu(text)
        assert items == [MenuItem(name="Soup", price=4.5, calories=300.0, protein=12.0,
                                  sat_fat=1.5, tags=["vegan", "gf"])]

    def test_tags_as_pipe_string(self):
        text = json.dumps([{"name": "Bowl", "price": 6, "calories": 480, "tags": "Vegan|High-Fiber"}])
        assert parse_menu(text)[0].tags == ["vegan", "high-fiber"]

    def test_empty_array(self):
        assert parse_menu("[]") == []

    def test_missing_name_uses_placeholder(self):
        items = parse_menu('[{"price": 3, "calories": 100}]')
        assert items[0].name == "Unnamed"

    def test_missing_price_defaults_to_zero(self):
        items = parse_menu('[{"name": "Water", "price": null}]')
        assert items[0].price == 0.0
        assert items[0].calories == 0.0

    def test_non_numeric_price_is_zero(self):
        items = parse_menu('[{"name": "Mystery", "price": "market", "calories": 300}]')
        assert [(it.name, it.price) for it in items] == [("Mystery", 0.0)]

    def test_blank_price_is_zero(self):
        items = parse_menu('[{"name": "W", "price": "  ", "calories": 100}]')
        assert [it.price for it in items] == [0.0]

    def test_boolean_reads_as_number(self):
        assert parse_menu('[{"name": "Flag", "price": true, "calories": 1}]')[0].price == 1.0

    def test_infinite_calories_is_dropped(self):
        assert parse_menu('[{"name": "Feast", "price": 5, "calories": "Infinity"}]') == []

    def test_non_numeric_optional_field_is_zero(self):
        items = parse_menu('[{"name": "Wrap", "price": 5, "calories": 500, "sodium": "high"}]')
        assert items[0].sodium == 0.0

    def test_infinite_optional_field_is_kept(self):
        items = parse_menu('[{"name": "Shake", "price": 5, "calories": 500, "protein": "Infinity"}]')
        assert math.isinf(items[0].protein)

    def test_non_object_element(self):
        items = parse_menu("[5]")
        assert [it.name for it in items] == ["Unnamed"]

    def test_json_object_falls_through_to_lines(self):
        assert parse_menu('{"name": "Soup"}') == []

    def test_json_scalar_falls_through_to_lines(self):
        assert parse_menu("42") == []

    def test_malformed_json(self):
        assert parse_menu("{not json") == []


# ============================================================================
# Delimited lines
# ============================================================================

class TestLineMenu:
    def test_full_line(self):
        items = parse_menu("Lentil Soup,4.99,320,16,8,4,1,480,Vegan|Gluten-Free")
        assert items == [MenuItem(name="Lentil Soup", price=4.99, calories=320.0, protein=16.0,
                                  fiber=8.0, sugar=4.0, sat_fat=1.0, sodium=480.0,
                                  tags=["vegan", "gluten-free"])]

    def test_optional_fields_default(self):
        item = parse_menu("Rice,2.99,200")[0]
        assert (item.protein, item.fiber, item.sugar, item.sat_fat, item.sodium) == (0, 0, 0, 0, 0)
        assert item.tags == []

    def test_tabs_and_crlf(self):
        items = parse_menu("A\t5\t300\r\nB\t6\t400\r\n")
        assert [it.name for it in items] == ["A", "B"]

    def test_comments_and_blank_lines(self):
        text = "# name,price,calories\n\n   \nFruit Cup,2.49,120\n  # another comment"
        assert [it.name for it in parse_menu(text)] == ["Fruit Cup"]

    def test_too_few_fields(self):
        assert parse_menu("Salad,7.99") == []

    def test_non_numeric_price_line_is_zero(self):
        items = parse_menu("Soup,abc,300\nSalad,$7.99,420")
        assert [(it.name, it.price, it.calories) for it in items] == [("Soup", 0.0, 300.0), ("Salad", 0.0, 420.0)]

    def test_infinite_price_line_is_dropped(self):
        assert [it.name for it in parse_menu("Feast,inf,300\nRice,2,200")] == ["Rice"]

    def test_non_numeric_protein_is_zero(self):
        assert parse_menu("Soup,4,300,lots")[0].protein == 0.0

    def test_empty_name_uses_placeholder(self):
        assert parse_menu(",4,300")[0].name == "Unnamed"

    def test_duplicates_are_kept_in_order(self):
        items = parse_menu("A,5,300\nA,5,300\nB,1,1")
        assert [it.name for it in items] == ["A", "A", "B"]

    def test_same_text_same_items(self):
        text = "A,5,300,10,2,1,1,50\nB,5,300,10,2,1,1,50"
        assert parse_menu(text) == parse_menu(text)


class TestSanitizeItems:
    def test_empty(self):
        assert sanitize_items([]) == []

    def test_every_item_is_valid(self):
        records = [{"name": "ok", "price": 1, "calories": 2}, {"name": "bad", "price": "x"},
                   {"name": "", "price": 1, "calories": 1}, "junk"]
        for it in sanitize_items(records):
            assert it.name
            assert math.isfinite(it.price) and math.isfinite(it.calories)


# ============================================================================
# Diet filter / table
# ============================================================================

@pytest.fixture
def menu_items():
    return parse_menu(
        "Soup,4,300,,,,,,vegan|gluten-free\n"
        "Omelette,5,380,,,,,,vegetarian\n"
        "Salmon,9,460,,,,,,gluten-free"
    )


class TestFilterByDiet:
    def test_any_keeps_everything(self, menu_items):
        assert filter_by_diet(menu_items, "any") == menu_items

    def test_vegan(self, menu_items):
        assert [it.name for it in filter_by_diet(menu_items, "vegan")] == ["Soup"]

    def test_gluten_free(self, menu_items):
        assert [it.name for it in filter_by_diet(menu_items, "gluten-free")] == ["Soup", "Salmon"]


class TestItemsTable:
    def test_columns(self, menu_items):
        df = items_frame(menu_items)
        assert list(df.columns) == ["Name", "Price", "Calories", "Protein", "Fiber",
                                    "Sugar", "SatFat", "Sodium", "Tags"]
        assert df.loc[0, "Tags"] == "vegan, gluten-free"

    def test_format(self, menu_items):
        text = format_items(menu_items)
        assert "Omelette" in text
        assert "$9.00" in text

    def test_format_empty(self):
        assert format_items([]) == "No valid items found. Check your menu format."
