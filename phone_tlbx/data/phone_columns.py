"""Column definitions for the cellphone specification and price dataset."""

from .base_columns import BaseColumn, ColumnKind, ColumnMetadata


class PhoneColumn(BaseColumn):
    """Column names for the cellphone price dataset, in raw file order.

    Columns:
    - ``id``: int - Product identifier (dropped)
    - ``price``: float - Retail price (target variable)
    - ``sales_number``: int - Units sold (dropped)
    - ``weight``: float - Weight in grams
    - ``resolution``: float - Screen diagonal in inches (dropped, ambiguous unit)
    - ``ppi``: float - Pixel density (pixels per inch)
    - ``core``: category - Number of CPU cores
    - ``freq``: float - CPU clock frequency (GHz)
    - ``memory``: category - Internal storage (GB)
    - ``ram``: float - RAM (dropped, mixed units)
    - ``rear_cam``: float - Rear camera resolution in MP (dropped)
    - ``front_cam``: float - Front camera resolution in MP (dropped)
    - ``battery``: float - Battery capacity (mAh)
    - ``thickness``: float - Thickness (mm)
    """

    ID = "id"
    PRICE = "price"
    """Retail price (target variable)."""
    SALES_NUMBER = "sales_number"
    WEIGHT = "weight"
    RESOLUTION = "resolution"
    PPI = "ppi"
    CORE = "core"
    """Number of CPU cores; categorical with a fixed level set."""
    FREQ = "freq"
    MEMORY = "memory"
    """Internal storage in GB; categorical after unit normalization."""
    RAM = "ram"
    REAR_CAM = "rear_cam"
    FRONT_CAM = "front_cam"
    BATTERY = "battery"
    THICKNESS = "thickness"

    TARGET = PRICE

    def metadata(self) -> ColumnMetadata:
        mapping: dict[PhoneColumn, ColumnMetadata] = {
            PhoneColumn.ID: ColumnMetadata(
                original_name="Product_id",
                cleaned_name="id",
                kind=ColumnKind.DROPPED,
                pretty_name="Product ID",
            ),
            PhoneColumn.PRICE: ColumnMetadata(
                original_name="Price",
                cleaned_name="price",
                kind=ColumnKind.RESPONSE,
                pretty_name="Price",
            ),
            PhoneColumn.SALES_NUMBER: ColumnMetadata(
                original_name="Sale",
                cleaned_name="sales_number",
                kind=ColumnKind.DROPPED,
                pretty_name="Units Sold",
            ),
            PhoneColumn.WEIGHT: ColumnMetadata(
                original_name="weight",
                cleaned_name="weight",
                kind=ColumnKind.CONTINUOUS,
                pretty_name="Weight (g)",
            ),
            PhoneColumn.RESOLUTION: ColumnMetadata(
                original_name="resoloution",
                cleaned_name="resolution",
                kind=ColumnKind.DROPPED,
                pretty_name="Screen Size (in)",
            ),
            PhoneColumn.PPI: ColumnMetadata(
                original_name="ppi",
                cleaned_name="ppi",
                kind=ColumnKind.CONTINUOUS,
                pretty_name="Pixel Density (PPI)",
            ),
            PhoneColumn.CORE: ColumnMetadata(
                original_name="cpu core",
                cleaned_name="core",
                kind=ColumnKind.CATEGORICAL,
                pretty_name="CPU Cores",
            ),
            PhoneColumn.FREQ: ColumnMetadata(
                original_name="cpu freq",
                cleaned_name="freq",
                kind=ColumnKind.CONTINUOUS,
                pretty_name="CPU Frequency (GHz)",
            ),
            PhoneColumn.MEMORY: ColumnMetadata(
                original_name="internal mem",
                cleaned_name="memory",
                kind=ColumnKind.CATEGORICAL,
                pretty_name="Internal Memory (GB)",
            ),
            PhoneColumn.RAM: ColumnMetadata(
                original_name="ram",
                cleaned_name="ram",
                kind=ColumnKind.DROPPED,
                pretty_name="RAM",
            ),
            PhoneColumn.REAR_CAM: ColumnMetadata(
                original_name="RearCam",
                cleaned_name="rear_cam",
                kind=ColumnKind.DROPPED,
                pretty_name="Rear Camera (MP)",
            ),
            PhoneColumn.FRONT_CAM: ColumnMetadata(
                original_name="Front_Cam",
                cleaned_name="front_cam",
                kind=ColumnKind.DROPPED,
                pretty_name="Front Camera (MP)",
            ),
            PhoneColumn.BATTERY: ColumnMetadata(
                original_name="battery",
                cleaned_name="battery",
                kind=ColumnKind.CONTINUOUS,
                pretty_name="Battery (mAh)",
            ),
            PhoneColumn.THICKNESS: ColumnMetadata(
                original_name="thickness",
                cleaned_name="thickness",
                kind=ColumnKind.CONTINUOUS,
                pretty_name="Thickness (mm)",
            ),
        }
        return mapping[self]
