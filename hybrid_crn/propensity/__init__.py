from .evaluator import PropensityEvaluator, MassActionPropensity, FunctionPropensity, PropensityFn

__all__ = ["PropensityEvaluator", "MassActionPropensity", "FunctionPropensity", "PropensityFn"]
