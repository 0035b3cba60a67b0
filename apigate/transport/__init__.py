"""HTTP transport helpers for clients and servers."""