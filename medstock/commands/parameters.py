from __future__ import annotations

from dataclasses import dataclass

ID = "i"
NAME = "n"
PRICE = "p"
QUANTITY = "q"
EXPIRY_DATE = "e"
DESCRIPTION = "d"
MAX_QUANTITY = "m"
CUSTOMER_ID = "c"
STAFF = "s"
DATE = "date"
STOCK_ID = "sid"
SORT = "sort"
REVERSED_SORT = "rsort"

ADD_SYNTAX = "ADD n/NAME p/PRICE q/QUANTITY e/EXPIRY_DATE d/DESCRIPTION m/MAX_QUANTITY"
LIST_SYNTAX = (
    "LIST [i/STOCK_ID n/NAME p/PRICE q/QUANTITY e/EXPIRY_DATE d/DESCRIPTION "
    "m/MAX_QUANTITY sort/COLUMN_NAME rsort/COLUMN_NAME]"
)
UPDATE_SYNTAX = "UPDATE i/STOCK_ID [n/NAME p/PRICE q/QUANTITY e/EXPIRY_DATE d/DESCRIPTION m/MAX_QUANTITY]"
DELETE_SYNTAX = "DELETE i/STOCK_ID"
DISPENSE_SYNTAX = "DISPENSE n/NAME q/QUANTITY c/CUSTOMER_ID s/STAFF_NAME"
LIST_DISPENSE_SYNTAX = (
    "LISTDISPENSE [i/ID n/NAME q/QUANTITY c/CUSTOMER_ID date/DATE s/STAFF_NAME "
    "sid/STOCK_ID sort/COLUMN_NAME rsort/COLUMN_NAME]"
)
PURGE_SYNTAX = "PURGE"
HELP_SYNTAX = "HELP"
EXIT_SYNTAX = "EXIT"


@dataclass(frozen=True)
class ParameterSpec:
    syntax: str
    required: tuple[str, ...] = ()
    optional: tuple[str, ...] = ()


ADD_NEW = ParameterSpec(
    syntax=ADD_SYNTAX,
    required=(NAME, PRICE, QUANTITY, EXPIRY_DATE, DESCRIPTION, MAX_QUANTITY),
)
ADD_EXISTING = ParameterSpec(
    syntax=ADD_SYNTAX,
    required=(NAME, PRICE, QUANTITY, EXPIRY_DATE),
    optional=(DESCRIPTION, MAX_QUANTITY),
)
LIST = ParameterSpec(
    syntax=LIST_SYNTAX,
    optional=(ID, NAME, PRICE, QUANTITY, EXPIRY_DATE, DESCRIPTION, MAX_QUANTITY, SORT, REVERSED_SORT),
)
UPDATE = ParameterSpec(
    syntax=UPDATE_SYNTAX,
    required=(ID,),
    optional=(NAME, PRICE, QUANTITY, EXPIRY_DATE, DESCRIPTION, MAX_QUANTITY),
)
DELETE = ParameterSpec(syntax=DELETE_SYNTAX, required=(ID,))
DISPENSE = ParameterSpec(syntax=DISPENSE_SYNTAX, required=(NAME, QUANTITY, CUSTOMER_ID, STAFF))
LIST_DISPENSE = ParameterSpec(
    syntax=LIST_DISPENSE_SYNTAX,
    optional=(ID, NAME, QUANTITY, CUSTOMER_ID, DATE, STAFF, STOCK_ID, SORT, REVERSED_SORT),
)
PURGE = ParameterSpec(syntax=PURGE_SYNTAX)
HELP = ParameterSpec(syntax=HELP_SYNTAX)
EXIT = ParameterSpec(syntax=EXIT_SYNTAX)

ALL_SYNTAX: tuple[str, ...] = (
    ADD_SYNTAX,
    LIST_SYNTAX,
    UPDATE_SYNTAX,
    DELETE_SYNTAX,
    DISPENSE_SYNTAX,
    LIST_DISPENSE_SYNTAX,
    PURGE_SYNTAX,
    HELP_SYNTAX,
    EXIT_SYNTAX,
)
