# apigate

Building blocks for an HTTP API gateway:

- **Service discovery** (`apigate.sd.subscriber`): subscribers that report the
  current set of backend hosts. `FixedSubscriber` holds a constant list,
  `SubscriberFunc` wraps any callable returning hosts.
- **DNS SRV discovery** (`apigate.sd.dnssrv`): a subscriber that resolves SRV
  records and refreshes its cached hosts in the background.
- **Load balancing** (`apigate.sd.loadbalancing`): round-robin and seeded
  random balancers picking a host from a subscriber.
- **Subscriber register** (`apigate.sd.register`): a named registry of
  subscriber factories, falling back to fixed hosts for unknown names.
- **Backend HTTP client helpers** (`apigate.transport.client.executor`,
  `apigate.transport.client.status`): a request executor built on
  `requests`, and status handlers that reject responses other than 200/201
  or report the backend's error details.
- **Server setup** (`apigate.transport.server.server`): TLS settings parsing
  and a WSGI server runner that stops when an event is set.
- **Router interfaces** (`apigate.router`): the abstract `Router` and
  `RouterFactory`, and `RouterFunc` to turn a callable into a router.

## Installation

```
pip install apigate
```

## Load balancing

```python
from apigate.sd.subscriber import FixedSubscriber
from apigate.sd.loadbalancing import new_round_robin_lb, NoHostsError

balancer = new_round_robin_lb(FixedSubscriber(["http://a:8080", "http://b:8080"]))
print(balancer.host())  # http://a:8080
print(balancer.host())  # http://b:8080

try:
    new_round_robin_lb(FixedSubscriber([])).host()
except NoHostsError:
    print("no hosts available")
```

`new_random_lb(subscriber, seed)` picks hosts pseudo-randomly with a
reproducible seed. For a `FixedSubscriber` with a single host, both functions
return a `NopBalancer` that always answers with that host.

## Subscriber register

`get_subscriber(backend)` looks up the factory registered under the
backend's `sd` attribute and calls it with the backend. When no factory fits,
the backend's `host` list is used as a `FixedSubscriber`.

```python
from types import SimpleNamespace
from apigate.sd.register import register_subscriber_factory, get_subscriber
from apigate.sd.subscriber import SubscriberFunc

register_subscriber_factory("static", lambda backend: SubscriberFunc(lambda: ["http://one"]))
print(get_subscriber(SimpleNamespace(sd="static", host=[])).hosts())  # ['http://one']
```

`reset_register()` replaces the package register with an empty one.

## DNS SRV discovery

```python
from apigate.sd import dnssrv

with dnssrv.new("_http._tcp.service.example.com") as subscriber:
    print(subscriber.hosts())  # e.g. ["http://10.0.0.1:80", ...]
```

Hosts are refreshed every `dnssrv.TTL` seconds (30 by default); a failed
lookup keeps the previous hosts. `new_detailed(name, lookup, ttl)` takes a
custom lookup callable returning `(cname, [(target, port), ...])`.
Calling `dnssrv.register()` makes the `"dns"` discovery name available
through `apigate.sd.register.get_subscriber`.

## Status handling

```python
from apigate.transport.client.status import get_http_status_handler

handler = get_http_status_handler(backend)
response = handler(response)  # raises InvalidStatusCodeError unless 200/201
```

When the backend's `extra_config` has a `"apigate/http"` section with a
non-empty `"return_error_details"` name, the handler raises
`HTTPResponseError` instead, carrying the backend's status code, body and
that name.

## Running a server

```python
import threading
from apigate.transport.server.server import ServerConfig, TLSConfig, run_server

def app(environ, start_response):
    start_response("200 OK", [("Content-Type", "text/plain")])
    return [b"hello"]

stop = threading.Event()
threading.Thread(target=run_server, args=(ServerConfig(port=8080), app, stop)).start()
# ... later
stop.set()
```

With a `TLSConfig` that is not disabled, `run_server` serves over TLS using
`public_key` (certificate file) and `private_key` (key file), raising
`PublicKeyError` or `PrivateKeyError` when either is missing.

## What this package does not do

There is no concrete router, no proxy layer that forwards requests to
backends, no configuration file loading and no command-line program. The
router module only defines interfaces; wiring endpoints to backends is left
to the application.

## Running tests

```
pip install -e .[test]
pytest
```