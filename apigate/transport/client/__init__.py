"""Backend HTTP client: request execution and response status handling."""