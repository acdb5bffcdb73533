# Upper bound on nested points cascades within one task completion
MAX_CASCADE_DEPTH = 16

LOG_FORMAT = '%(asctime)s [%(levelname)s] %(name)s: %(message)s'
