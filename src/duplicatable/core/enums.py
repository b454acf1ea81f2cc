"""
Enumeration classes used throughout the Duplicatable package.
"""

from enum import StrEnum


class Cardinality(StrEnum):
    """How many records a relationship yields on its parent.

    Attributes:
        one: A single related record, or None.
        many: An ordered list of related records.
        many_to_many: A list of related records linked through a join table. Each
            record carries the join row under the relationship's join data field.
    """
    one = "one"
    many = "many"
    many_to_many = "many_to_many"

    @property
    def is_collection(self) -> bool:
        return self is not Cardinality.one
