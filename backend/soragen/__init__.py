"""SoraGen — submit Sora video generation jobs and track them to completion."""
