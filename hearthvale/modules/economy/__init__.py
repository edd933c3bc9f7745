from hearthvale.modules.economy.subsystem import EconomySubsystem, Transaction

__all__ = ["EconomySubsystem", "Transaction"]
