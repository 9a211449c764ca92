# Candidate profile sync engine
