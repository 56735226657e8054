# ddnskit

A library of building blocks for dynamic DNS clients: request signers for
several cloud DNS APIs, an address cache, network and HTTP helpers, password
hashing, version comparison and a self-updater for an executable.

## Installation

From a checkout of the project:

```
pip install .
```

It needs Python 3.10 or newer, `requests`, `bcrypt` and `dnspython`.

## Modules

- `ddnskit.aliyun`: `hmac_sign`, `hmac_sign_to_b64` and `aliyun_signer`.
  `aliyun_signer` adds the common parameters (`SignatureMethod`,
  `SignatureNonce`, `AccessKeyId`, `SignatureVersion`, `Timestamp`, `Format`,
  `Version`) and the `Signature` to a parameter dict, changes it in place and
  returns it.
- `ddnskit.baidu`: `hmac_sha256_hex`, `baidu_canonical_uri` and
  `baidu_signer`. `baidu_signer` sets the `Authorization` header of a
  `requests.PreparedRequest`.
- `ddnskit.huawei`: the `Signer` dataclass (`key`, `secret`) and the steps it
  uses (`canonical_request`, `canonical_uri`, `canonical_query_string`,
  `canonical_headers`, `signed_headers`, `request_payload`, `string_to_sign`,
  `sign_string_to_sign`, `hex_encode_sha256_hash`, `auth_header_value`).
  `Signer.sign` adds `X-Sdk-Date` when that header is missing or invalid, and
  then sets `Authorization`.
- `ddnskit.tencent`: `tencent_cloud_signer` sets the `Authorization`, `Host`,
  `X-TC-Action` and `X-TC-Timestamp` headers for the DNSPod API.
- `ddnskit.traffic_route`: `traffic_route_signer` builds a signed
  `requests.PreparedRequest` for the Volcengine DNS API.
- `ddnskit.ip_cache`: `IpCache` holds the last address. `IpCache.check`
  returns `True` when the address must be compared with the DNS provider. That
  happens when the address is empty, when it has changed, or when the
  remaining count has run out. The count is read from the `DDNS_IP_CACHE_TIMES`
  environment variable and defaults to 5.
- `ddnskit.network`: `is_private_network`, which covers loopback, private and
  link-local addresses, with or without a port. It also provides
  `get_request_ip_str`, `init_backup_dns`, `set_dns`, `lookup_host` and
  `wait_internet`. `lookup_host` raises `OSError` when the host cannot be
  resolved. `wait_internet` blocks until one of the addresses resolves, and
  switches to the backup DNS servers in `BACKUP_DNS` when lookups fail.
- `ddnskit.http`: `create_http_client` returns a session with a 30 second
  timeout that uses proxies from the environment. `create_no_proxy_http_client`
  returns a session with no proxies and no keep-alive, bound to IPv6 for
  `"tcp6"` and to IPv4 otherwise. `set_insecure_skip_verify` turns off
  certificate checks for every client these functions create.
  `get_http_response_org` reads at most 1024000 bytes of a response body.
  `get_http_response` decodes that body as JSON. Both raise `HTTPStatusError`
  for a status of 300 or above.
- `ddnskit.password`: `hash_password`, `password_ok`, `is_hashed_password`
  (bcrypt) and `generate_token`.
- `ddnskit.semver`: `parse_version` and `Version`, with `compare`,
  `greater_than` and `greater_than_or_equal`. Only major, minor and patch are
  kept. Pre-release and build parts are accepted but ignored when versions are
  compared. Anything that is not a semantic version raises `ValueError`.
- `ddnskit.release`: `Asset`, `Release`, `Latest`, `new_release`,
  `get_latest`, `generate_additional_arch`, `get_suffixes`,
  `asset_match_suffixes`, `find_asset` and `detect_latest`. Together they find
  the newest release asset of a GitHub repository that fits this operating
  system and architecture.
- `ddnskit.selfupdate`: `apply` replaces a file safely: it writes `.new`,
  moves the old file to `.old`, and rolls back on failure. The module also
  provides `decompress_command` (`.zip` and `.tar.gz`),
  `match_executable_name`, `decompress_and_update`, `download_asset_from_url`,
  `update_to` and `self_update`. `self_update` uses the repository named in
  the `DDNS_UPDATE_REPOSITORY` environment variable. It does nothing when that
  variable is unset or when the current version is already the newest. The
  module raises `CannotDecompressFileError` and
  `ExecutableNotFoundInArchiveError`.
- `ddnskit.messages`: `log_str`, `log` and `init_log_lang`. Messages are keyed
  by their Chinese text and are rendered in English unless the language starts
  with `zh`. `log` writes to the `ddnskit` logger.
- `ddnskit.memory_logs`: `MemoryLogs` keeps the newest `max_num` entries
  (50 by default) and provides `write`, `clear` and `to_json`. `Result`,
  `return_error` and `return_ok` build JSON result bodies. On import, the module
  attaches a handler to the `ddnskit` logger. The handler copies each record
  into `MEMORY_LOGS` and to standard output.
- `ddnskit.text`: `escape`, `write_string`, `to_hostname`, `split_lines` and
  `ordinal`.
- `ddnskit.environment`: `is_termux`, `is_run_in_docker`,
  `get_config_file_path` (reads `DDNS_CONFIG_FILE_PATH`),
  `get_config_file_path_default`, `fix_timezone` and `open_explorer`.

## Examples

Checking whether an address needs to be pushed:

```python
from ddnskit.ip_cache import IpCache

cache = IpCache()
if cache.check("203.0.113.7"):
    print("compare with the DNS provider")
```

Signing an Alibaba Cloud request:

```python
from ddnskit.aliyun import aliyun_signer

params = {"Action": "DescribeSubDomainRecords", "SubDomain": "www.example.com"}
aliyun_signer("access-key-id", "secret", params)
```

Comparing versions:

```python
from ddnskit.semver import parse_version

parse_version("v1.2").greater_than(parse_version("1.1.9"))  # True
```

## What this package does not do

There is no command-line program, web server or configuration page. The
package does not read or store a configuration file: `get_config_file_path`
only returns a path. It has no clients that create or update records at DNS
providers. It signs requests, and sending them and reading the replies is left
to the caller.

## Running the tests

```
pip install -e .[test]
pytest
```