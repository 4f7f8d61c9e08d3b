"""Data module for dataset classes."""

from .cleaning import CleaningConfig, DataCleaner
from .covariates import CategoricalCovariate, ContinuousCovariate, CovariateSet
from .phone_columns import PhoneColumn as PhoneCol
from .phone_dataset import PhoneDataset
from .views import ModelView


__all__ = [
    "CategoricalCovariate",
    "CleaningConfig",
    "ContinuousCovariate",
    "CovariateSet",
    "DataCleaner",
    "ModelView",
    "PhoneCol",
    "PhoneDataset",
]
