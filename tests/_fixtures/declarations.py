"""Declaration documents shared across tests, in the front-end's JSON format."""

from __future__ import annotations

import copy
from typing import Any, Dict

POINT = {
    "kind": "struct",
    "name": "Point",
    "fields": [{"name": "x", "type": "i32"}, {"name": "y", "type": "i32"}],
    "location": "geometry.rs:3",
    "doc": "A point on the integer grid.",
}

SHAPE = {
    "kind": "enum",
    "name": "Shape",
    "variants": [
        {"name": "Circle", "fields": [{"name": "radius", "type": "f64"}]},
        "Square",
    ],
    "location": "geometry.rs:9",
}

FETCH = {
    "kind": "function",
    "name": "fetch",
    "params": [{"name": "id", "type": "u32"}],
    "return": "Result<String, String>",
    "async": True,
    "location": "geometry.rs:20",
}

COLOR = {
    "kind": "enum",
    "name": "Color",
    "variants": ["Red", {"name": "Green", "doc": "The default."}, "Blue"],
    "location": "paint.rs:1",
}

PAIR = {
    "kind": "struct",
    "name": "Pair",
    "fields": ["u64", "String"],
    "location": "paint.rs:8",
}

TREE = {
    "kind": "struct",
    "name": "Tree",
    "fields": [
        {"name": "value", "type": "i64"},
        {"name": "left", "type": "Option<Box<Tree>>"},
        {"name": "children", "type": "Vec<Tree>"},
    ],
    "location": "paint.rs:11",
}

MESSAGE = {
    "kind": "enum",
    "name": "Message",
    "variants": [
        "Quit",
        {"name": "Move", "fields": [{"name": "x", "type": "i32"}, {"name": "y", "type": "i32"}]},
        {"name": "Write", "types": ["String"]},
        {"name": "Paint", "types": ["Color", "Option<Point>"]},
    ],
    "location": "paint.rs:18",
}

INVENTORY = {
    "kind": "struct",
    "name": "Inventory",
    "fields": [
        {"name": "counts", "type": "HashMap<String, u32>"},
        {"name": "byColor", "type": "BTreeMap<Color, Vec<Point>>"},
        {"name": "tags", "type": "Vec<Option<String>>"},
        {"name": "ratio", "type": "f32"},
        {"name": "enabled", "type": "bool"},
    ],
    "location": "paint.rs:26",
}

ADD = {
    "kind": "function",
    "name": "add",
    "params": [{"name": "a", "type": "i32"}, {"name": "b", "type": "i32"}],
    "return": "i32",
    "doc": "Adds two numbers.",
}

PARSE_POINT = {
    "kind": "function",
    "name": "parsePoint",
    "params": [{"name": "text", "type": "String"}],
    "return": "Result<Point, String>",
}

RESET = {"kind": "function", "name": "reset", "params": [], "return": "()"}

PING = {"kind": "function", "name": "ping", "params": [], "async": True}


def module(*decls: Dict[str, Any], name: str = "geometry") -> Dict[str, Any]:
    """Build a declaration document from the given declarations, in order."""
    return {"module": name, "decls": [copy.deepcopy(decl) for decl in decls]}


def kitchen_sink() -> Dict[str, Any]:
    """A module that exercises every supported shape."""
    return module(
        COLOR, POINT, PAIR, TREE, SHAPE, MESSAGE, INVENTORY,
        ADD, PARSE_POINT, RESET, FETCH, PING,
        name="paint",
    )


__all__ = [
    "ADD",
    "COLOR",
    "FETCH",
    "INVENTORY",
    "MESSAGE",
    "PAIR",
    "PARSE_POINT",
    "PING",
    "POINT",
    "RESET",
    "SHAPE",
    "TREE",
    "kitchen_sink",
    "module",
]
