"""Health subsystem — probe result types plus the recorder and prober that produce them."""
