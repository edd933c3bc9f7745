from hearthvale.modules.farming.subsystem import CropSpec, FarmingSubsystem, FarmPlot, Harvest

__all__ = ["FarmingSubsystem", "CropSpec", "FarmPlot", "Harvest"]
