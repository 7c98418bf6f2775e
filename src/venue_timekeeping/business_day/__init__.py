from .resolver import BusinessDayInterval, BusinessDayResolver

__all__ = ["BusinessDayInterval", "BusinessDayResolver"]
