RunLengths = tuple[int, ...]
# (remaining cell symbols, remaining run lengths)
CacheKey = tuple[str, RunLengths]
CountCache = dict[CacheKey, int]
TraceLog = list[str]
CountResult = dict[str, object]
ProgressState = dict[str, int]
CountMethod = str
