SET_SYMBOL = "#"
UNSET_SYMBOL = "."
UNKNOWN_SYMBOL = "?"

MIN_RUN_LENGTH = 1
MIN_UNFOLD_FACTOR = 1
DEFAULT_UNFOLD_FACTOR = 5

# 2**20 resolutions is the most the brute-force enumerator will walk.
MAX_ENUMERATION_UNKNOWNS = 20

COUNT_METHODS = ("recursive", "iterative", "enumerate")

# Rows longer than this are counted with an explicit stack; the recursive
# evaluator nests one call per cell.
MAX_RECURSIVE_CELLS = 500
