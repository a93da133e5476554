"""Case attachment engine — dedup alert references before they reach the store.

Modules
───────
  dedup        — filter one request against the case snapshot and batch state
  builder      — request + dedup result -> persistable record (or drop)
  orchestrator — create / bulk_create flows, collaborator contracts
  loader       — JSON / JSONL request files -> AttachmentRequest
  store        — JSONL-backed index + persistence client
  cli          — argparse entry-point
"""
