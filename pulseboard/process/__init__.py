"""Pure reconciliation steps: classification, windowing, sorting, smoothing."""
