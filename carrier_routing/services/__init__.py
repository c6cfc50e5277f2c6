# Services layer: orchestration, collaborators, background jobs
