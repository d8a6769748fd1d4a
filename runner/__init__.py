"""
Command-line runner around the KNN core: dataset loading, configuration,
reporting and plots
"""
