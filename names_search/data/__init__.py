"""
Index build orchestration for the names search service.

This package is responsible for:
* Waiting for the store to come up at process start.
* Running the immediate build and the periodic rebuilds.
* Tracking the outcome of the most recent build.
"""
