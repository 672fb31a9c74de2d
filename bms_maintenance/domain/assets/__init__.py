"""Assets domain - maintenance history ledger"""
