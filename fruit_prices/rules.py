"""
Fixed parsing and display rules.

This file exists to make non-goals explicit: one delimiter, one quote
character, and the four columns the default view reads.
"""

DELIMITER = ","
QUOTE = '"'

FRUIT_FIELD = "Fruit"
FORM_FIELD = "Form"
RETAIL_PRICE_FIELD = "RetailPrice"
RETAIL_PRICE_UNIT_FIELD = "RetailPriceUnit"

SEARCH_FIELDS = (FRUIT_FIELD, FORM_FIELD)
