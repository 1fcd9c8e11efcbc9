from .parallel import default_workers, row_bands, run_row_bands

__all__ = ["default_workers", "row_bands", "run_row_bands"]
