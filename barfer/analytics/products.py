"""
Product families from free-text product names.

Rules are ordered (predicate, label) pairs; the first match wins and the
default applies when nothing matches. Adding a family means adding a row.
"""

from collections.abc import Callable

Rule = tuple[Callable[[str, str], bool], str]

OTHER_FAMILY = "OTROS"


def _name_has(*words: str) -> Callable[[str, str], bool]:
    return lambda name, option: any(w in name for w in words)


def _name_and_option_have(name_word: str, option_word: str) -> Callable[[str, str], bool]:
    return lambda name, option: name_word in name and option_word in option


def _name_has_all(*words: str) -> Callable[[str, str], bool]:
    return lambda name, option: all(w in name for w in words)


FAMILY_RULES: list[Rule] = [
    (_name_has("big dog"), "BIG DOG"),
    (_name_has("huesos"), "HUESOS CARNOSOS"),
    (_name_has("complement"), "COMPLEMENTOS"),
    (_name_has("perro"), "PERRO"),
    (_name_has("gato"), "GATO"),
]

# Big Dog's protein is in the option ("BIG DOG (15kg)" / "POLLO")
SUBCATEGORY_RULES: list[Rule] = [
    (_name_and_option_have("big dog", "pollo"), "big_dog_pollo"),
    (_name_and_option_have("big dog", "vaca"), "big_dog_vaca"),
    (_name_has("big dog"), "big_dog"),
    (_name_has_all("gato", "pollo"), "gato_pollo"),
    (_name_has_all("gato", "vaca"), "gato_vaca"),
    (_name_has_all("gato", "cordero"), "gato_cordero"),
    (_name_has("gato"), "gato"),
    (_name_has("pollo"), "pollo"),
    (_name_has("vaca"), "vaca"),
    (_name_has("cerdo"), "cerdo"),
    (_name_has("cordero"), "cordero"),
    (_name_has("huesos", "carnosos"), "huesos_carnosos"),
]

DOG_SUBCATEGORIES = ("pollo", "vaca", "cerdo", "cordero", "big_dog_pollo", "big_dog_vaca")
CAT_SUBCATEGORIES = ("gato_pollo", "gato_vaca", "gato_cordero")


def match_rules(rules: list[Rule], product_name: str, option_label: str = "", default: str = "") -> str:
    name = (product_name or "").lower()
    option = (option_label or "").lower()
    for predicate, label in rules:
        if predicate(name, option):
            return label
    return default


def product_family(product_name: str) -> str:
    """Family label for the sales-by-category report."""
    return match_rules(FAMILY_RULES, product_name, default=OTHER_FAMILY)


def product_subcategory(product_name: str, option_label: str = "") -> str:
    """Subcategory for the monthly quantity report ("otros" when unknown)."""
    return match_rules(SUBCATEGORY_RULES, product_name, option_label, default="otros")
