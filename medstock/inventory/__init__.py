from medstock.inventory.records import Batch, DispenseRecord, MedicineRecord, same_name
from medstock.inventory.registry import MedicineRegistry

__all__ = [
    "Batch",
    "DispenseRecord",
    "MedicineRecord",
    "MedicineRegistry",
    "same_name",
]
