"""
Data schemas for exported files.

Defines expected columns and data types for projection exports. Asset
columns depend on the portfolio, so only the fixed columns are declared.
"""

from dataclasses import dataclass


@dataclass
class ColumnSchema:
    """Schema definition for a single column."""
    name: str
    dtype: str  # pandas dtype string
    required: bool = True
    nullable: bool = False


@dataclass
class FileSchema:
    """Schema definition for a file."""
    name: str
    columns: list[ColumnSchema]
    description: str

    @property
    def required_columns(self) -> list[str]:
        """Get list of required column names."""
        return [c.name for c in self.columns if c.required]

    @property
    def all_columns(self) -> list[str]:
        """Get list of all column names."""
        return [c.name for c in self.columns]

    @property
    def dtypes(self) -> dict[str, str]:
        """Column name -> pandas dtype for the declared columns."""
        return {c.name: c.dtype for c in self.columns}

    def validate_columns(self, df_columns: list[str]) -> tuple[bool, list[str]]:
        """
        Validate that a dataframe has the required columns.

        Args:
            df_columns: List of column names from the dataframe

        Returns:
            Tuple of (is_valid, list of missing columns)
        """
        missing = [col for col in self.required_columns if col not in df_columns]
        return len(missing) == 0, missing


# Projection rows: month first, one float column per asset, then these totals
PROJECTION_SCHEMA = FileSchema(
    name="projection",
    description="Sampled DCA projection rows for one portfolio and scenario",
    columns=[
        ColumnSchema(name="month", dtype="int64", required=True),
        ColumnSchema(name="total", dtype="float64", required=True),
        ColumnSchema(name="cash_dividends", dtype="float64", required=True),
        ColumnSchema(name="dividend", dtype="float64", required=True),
        ColumnSchema(name="rebalanced", dtype="bool", required=True),
    ],
)

# Scenario summary across portfolios
SUMMARY_SCHEMA = FileSchema(
    name="summary",
    description="Headline figures per portfolio and scenario",
    columns=[
        ColumnSchema(name="portfolio_id", dtype="str", required=True),
        ColumnSchema(name="scenario", dtype="str", required=True),
        ColumnSchema(name="months", dtype="int64", required=True),
        ColumnSchema(name="total_invested", dtype="float64", required=True),
        ColumnSchema(name="final_value", dtype="float64", required=True),
        ColumnSchema(name="profit", dtype="float64", required=True),
        ColumnSchema(name="roi_pct", dtype="float64", required=True, nullable=True),
        ColumnSchema(name="total_cash_dividends", dtype="float64", required=True),
    ],
)
