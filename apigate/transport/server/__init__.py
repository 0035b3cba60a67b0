"""HTTP server setup, including TLS settings."""