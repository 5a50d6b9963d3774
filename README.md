# zanobia

The domain core of an inventory manager for a food business. It provides the
models, validation rules and services for the following:

- **units** of measure and conversions between them (grams, kilograms, litres,
  tablespoons and so on). An in-memory cache sits in front of a repository.
- **warehouses**. The current warehouse is held in a context scope.
- **users**, **roles** and **permissions**, with permission checks.
- **retailers** and their contacts.
- **retailer stock batches**. Batches are incremented and decremented in bulk
  while the affected batches are locked.
- **transaction history** for retailer and warehouse stock movements.

Each service takes the objects it works through, such as a repository or a
locker, as constructor arguments. You provide these objects: a database layer,
or in-memory fakes in tests. A service validates its input, applies the
business rules and then calls the repository. Invalid input raises an
exception from `zanobia.errors`.

## Installation

```
pip install .
```

To install the test dependencies and run the tests:

```
pip install ".[test]"
pytest
```

## Modules

| Module | Contents |
| --- | --- |
| `zanobia.errors` | `AppError` and its subclasses `BadRequestError`, `NotFoundError`, `ValidationError`, `UnauthorizedError`, `ForbiddenError`, `InternalServerError`; `ErrorDetails`; `get_error_code_from_error` |
| `zanobia.validation` | Field validators (`validate_string_length`, `validate_id`, `validate_id_ptr`, `validate_not_zero`, `validate_amount_positive`, `validate_alphanumeric_name`, `validate_url`), `raise_if_invalid`, `validate_unit`, `validate_unit_conversion` |
| `zanobia.warehouse` | `Warehouse`, `WarehouseUserInput`, `WarehouseService`, `warehouse_scope`, `get_warehouse_id`, `warehouse_id_from_header`, `validate_warehouse` |
| `zanobia.user` | `User`, `UserInput`, `UserLoginInput`, `Role`, `Permission`, `PermissionClaim`, `PermissionService`, `RoleService`, `user_scope`, `get_user_from_context`, `check_permissions` and the user, role and permission validators |
| `zanobia.unit` | `Unit`, `UnitConversion`, `UnitConversionInput`, `ConvertUnitInput`, `ConvertUnitOutput`, `UnitService`, `INITIAL_UNITS`, `INITIAL_CONVERSIONS` |
| `zanobia.retailer` | `Retailer`, `RetailerContact`, `validate_retailer`, `validate_retailer_contacts`, `validate_retailer_contact` |
| `zanobia.transactions` | `TransactionReason`, `TransactionReasonType`, `Transaction`, `TransactionInput`, the warehouse and retailer transaction commands, `TransactionService` |
| `zanobia.retailer_batch_models` | Retailer batch inputs, bases, update and create requests, `validate_batch_inputs_increment`, `validate_batch_inputs_decrement`, `create_batch_lock_key`, `extract_batch_info` |
| `zanobia.retailer_service` | `RetailerService` |
| `zanobia.retailer_batch_service` | `RetailerBatchService` |

## Errors

Validation failures raise `ValidationError`. Its `details` attribute holds
one `ErrorDetails` for each field that failed. Rule violations, such as a
decrement that would take a batch below zero, raise `BadRequestError`. A
failed permission check raises `ForbiddenError`, and a missing user raises
`UnauthorizedError`. Every error type has an HTTP `status`.

`get_error_code_from_error(err)` reads a `pgcode` or `sqlstate` attribute
from a database exception, or from the exception that caused it. It returns
`"DUPLICATE"` for a unique violation (`23505`) and `"UNKNOWN"` for anything
else.

## Context scopes

Some operations depend on the current user or warehouse. Transaction history
records are one example. These operations read the values from context
variables, which you set with scopes:

```python
from zanobia.user import User, user_scope
from zanobia.warehouse import warehouse_scope

with user_scope(User(id=1, first_name="Sam", last_name="Example")), warehouse_scope(3):
    batch_service.bulk_increment_batch(inputs)
```

`warehouse_id_from_header(headers)` reads the `X-Warehouse-Id` header and
returns 0 when the header is missing or is not an integer.
`check_permissions(user, *handles)` returns the user if the user holds every
handle. A user with `sys_admin` passes every check.

## Unit conversion

```python
from zanobia.unit import ConvertUnitInput, UnitService

service = UnitService(repo)
service.setup_units_map()
service.setup_unit_conversions_map()

result = service.convert_unit(ConvertUnitInput(to_unit_id=2, from_unit_id=1, quantity=500))
print(result.quantity, result.unit.symbol)
```

When a conversion is not in the cache, the service fetches it from the
repository and then caches it. `initiate_all()` creates the standard units and
conversions and reloads both caches. It logs any item that fails and goes on
with the rest.

## What you supply

The services call these methods on the objects you pass in:

- `WarehouseService(repo)`: `create_warehouse`, `get_warehouses(user_id)`,
  `add_user_to_warehouse`, `get_warehouse_by_id(warehouse_id, user_id)`,
  `update_warehouse`.
- `PermissionService(repository)`: `initiate_all(permissions)`,
  `create_permission`, `find_by_handle`, `get_all_permissions`.
- `RoleService(repository)`: `create_role`, `get_roles`.
- `UnitService(repo)`:
  - `create_unit`, which returns the new id
  - `translate_unit`
  - `get_all_units`
  - `get_unit_by_id`
  - `get_unit_from_name`
  - `add_unit_conversion`
  - `get_unit_conversion_by_unit_id(to_id, from_id)`
  - `get_unit_conversions`
- `TransactionService(repo)`:
  - `create_transaction_reason`
  - `get_transaction_reasons`
  - `insert_transaction`
  - `insert_transaction_to_batch(input, batch)`
  - the `get_transactions_of_*` queries
- `RetailerService(repo, batch_service)`:
  - the retailer and contact create, read, update and remove methods
  - `remove_all_contacts_of_retailer`
  - `remove_retailer_translations`
  - `transaction()`, a context manager in which the removal steps commit or
    roll back together
  - on `batch_service`: `delete_batches_of_retailer`
- `RetailerBatchService(repo, unit_service, transaction_service, locker)`:
  - on `repo`: `get_bulk_batch_update_info(inputs)`, `transaction()`,
    `process_bulk_batch_unit_of_work(unit_of_work, transactions_batch)` and
    `delete_batches_of_retailer`
  - on `locker`: `lock(key)`, a context manager that holds the named lock

## What this package does not do

- **Storage.** It has no database code and no SQL. The repositories above are
  yours to write.
- **HTTP.** It has no web server, routes or request handlers.
- **Login.** It has no login, password hashing or token handling.
- **Listing pages.** It has no paginated listing of retailers or batches.
- **Locks.** It has no distributed lock implementation. It only takes a
  locker object that you provide.