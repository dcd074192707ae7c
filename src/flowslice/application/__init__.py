"""
flowslice application layer.

**Core Components:**

1. **Error Handling** (`errors.py`):
   - `SliceError` and the typed errors raised by the model, the criterion
     helpers and the engine

2. **Configuration** (`config.py`):
   - `SliceConfig`: dependence options, budget, workers and exclusions

3. **Resources** (`resources.py`):
   - Access to the packaged exclusions file
"""
