"""
WQP pull planning
=======================================================

* inventory: per-state "what data" inventory with a county-half fallback
* partition: site-level partitioning of the inventory into pull tasks
* errors: failures that stop a pull
"""
