"""Tests for the template registry and the built-in definitions."""

import pytest

from monogen.templates import FULL_DOMAIN, generate_domain, generate_library
from monogen.templates.core.config import load_config
from monogen.templates.core.resolver import create_context_from_name
from monogen.templates.registry import TemplateRegistryError, create_template_registry


@pytest.fixture
def registry():
    return create_template_registry()


class TestRegistration:
    def test_builtins(self, registry):
        assert registry.list_templates() == [
            "contract/errors",
            "contract/rpc-definitions",
            "data-access/errors",
            "data-access/layers",
            "feature/errors",
            "feature/layers",
            "feature/service",
            "infra/errors",
            "infra/service",
            "provider/errors",
            "provider/service",
        ]
        assert registry.list_library_types() == ["contract", "data-access", "feature", "infra", "provider"]
        assert registry.list_templates("infra") == ["infra/errors", "infra/service"]

    def test_required_and_optional_context(self, registry):
        entry = registry.get("contract/errors")
        assert entry.id == "contract/errors"
        assert {"className", "scope", "fileName", "propertyName"} <= set(entry.required_context)
        assert entry.optional_context == ("includeCQRS",)
        assert entry.description

    def test_register_custom(self, registry, raw_definition):
        entry = registry.register(raw_definition("{className}", template_id="custom/one"))
        assert entry.required_context == ("className",)
        assert "custom" in registry.list_library_types()

    def test_register_rejects_bad_ids(self, registry, raw_definition):
        with pytest.raises(TemplateRegistryError, match="libraryType"):
            registry.register(raw_definition("x", template_id="flat"))
        with pytest.raises(TemplateRegistryError, match="already registered"):
            registry.register(raw_definition("x", template_id="infra/service"))

    def test_unknown_template(self, registry):
        with pytest.raises(TemplateRegistryError, match="Available: contract/errors"):
            registry.get("nope/missing")

    def test_unregister(self, registry):
        registry.unregister("infra/errors")
        assert not registry.has("infra/errors")


class TestContextChecks:
    def test_validate_context(self, registry, context):
        assert registry.validate_context("infra/service", context) == []

    def test_validate_context_reports_missing(self, registry):
        sparse = {"className": "A", "fileName": "a", "propertyName": "a"}
        assert registry.validate_context("infra/service", sparse) == ["Missing context value: scope"]

    def test_active_flags(self, registry):
        context = create_context_from_name("order", includeCQRS=True)
        assert registry.active_flags("contract/errors", context) == ["includeCQRS"]


class TestCompileLibrary:
    def test_contract_library(self, registry, context, fragments):
        results = registry.compile_library("contract", context, fragments)
        assert list(results) == ["contract/errors", "contract/rpc-definitions"]
        assert all(result.success for result in results.values())

        errors = results["contract/errors"].value
        assert "export class UserProfileNotFoundError" in errors
        assert "export class UserProfileAlreadyExistsError" in errors
        assert "readonly userProfileId: string" in errors
        assert "UserProfileCommandError" not in errors

        rpcs = results["contract/rpc-definitions"].value
        assert 'export class GetUserProfile extends Rpc.make("GetUserProfile", {' in rpcs
        assert 'RouteType = "admin"' in rpcs
        assert " * @module @acme/contract-user-profile/rpc\n" in rpcs

    def test_cqrs_flag_adds_command_errors(self, registry, fragments):
        context = create_context_from_name("user-profile", scope="@acme", includeCQRS=True)
        result = registry.compile("contract/errors", context, fragments)
        assert "export class UserProfileCommandError" in result.value

    def test_infra_service_layer_order(self, registry, context, fragments):
        results = registry.compile_library("infra", context, fragments)
        assert all(result.success for result in results.values())
        service = results["infra/service"].value
        live = service.index("static Live = ")
        test = service.index("static Test = ")
        dev = service.index("static Dev = ")
        assert live < test < dev
        assert 'Context.Tag("@acme/infra-user-profile/UserProfileService")' in service

    def test_compact_config(self, registry, context, fragments):
        result = registry.compile("infra/errors", context, fragments, load_config("compact"))
        assert result.success
        assert not result.value.startswith("/**\n * UserProfile")
        assert "// ====" not in result.value

    def test_unknown_library_type(self, registry, context, fragments):
        with pytest.raises(TemplateRegistryError, match="No templates"):
            registry.compile_library("nope", context, fragments)

    def test_file_types_subset(self, registry, context, fragments):
        results = registry.compile_library("feature", context, fragments, file_types=["errors"])
        assert list(results) == ["feature/errors"]
        assert results["feature/errors"].success

    def test_unknown_file_type(self, registry, context, fragments):
        with pytest.raises(TemplateRegistryError, match="feature/hooks"):
            registry.compile_library("feature", context, fragments, file_types=["errors", "hooks"])


class TestDataAccessLibrary:
    def test_compiles(self, registry, context, fragments):
        results = registry.compile_library("data-access", context, fragments)
        assert list(results) == ["data-access/errors", "data-access/layers"]
        assert all(result.success for result in results.values())

    def test_errors(self, registry, context, fragments):
        text = registry.compile("data-access/errors", context, fragments).value
        assert 'export class UserProfileConnectionError extends Data.TaggedError("UserProfileConnectionError")<{' in text
        assert "export class UserProfileTransactionError" in text
        assert "`Operation '${operation}' timed out after ${timeoutMs}ms`" in text
        assert 'import type { UserProfileRepositoryError } from "@acme/contract-user-profile"' in text
        assert (
            "export type UserProfileDataAccessError = "
            "UserProfileRepositoryError | UserProfileInfrastructureError"
        ) in text

    def test_layers(self, registry, context, fragments):
        text = registry.compile("data-access/layers", context, fragments).value
        assert (
            "export const InfrastructureTest = Layer.mergeAll("
            "DatabaseService.Test, LoggingService.Test, MetricsService.Test, CacheService.Test)"
        ) in text
        assert (
            "export const UserProfileDataAccessLive = "
            "UserProfileRepository.Live.pipe(Layer.provide(InfrastructureLive))"
        ) in text
        assert "export const UserProfileDataAccessAuto = Layer.suspend(() => {\n" in text
        assert "      return UserProfileDataAccessDev\n" in text
        assert text.count('from "effect"') == 1


class TestFeatureLibrary:
    def test_compiles(self, registry, context, fragments):
        results = registry.compile_library("feature", context, fragments)
        assert list(results) == ["feature/errors", "feature/layers", "feature/service"]
        assert all(result.success for result in results.values())

    def test_errors(self, registry, context, fragments):
        text = registry.compile("feature/errors", context, fragments).value
        assert "export const UserProfileServiceErrorCode = {\n" in text
        assert "  readonly code: typeof UserProfileServiceErrorCode.ORCHESTRATION\n" in text
        assert "  static make(step: string, completedSteps: readonly string[], message: string, cause?: unknown) {\n" in text
        assert "      code: UserProfileServiceErrorCode.DEPENDENCY,\n" in text
        assert "export type UserProfileFeatureError = UserProfileDomainError | UserProfileServiceError" in text

    def test_service(self, registry, context, fragments):
        text = registry.compile("feature/service", context, fragments).value
        assert 'Context.Tag("@acme/feature-user-profile/UserProfileService")' in text
        assert "readonly count: (criteria: UserProfileFilter) => Effect.Effect<number, UserProfileFeatureError>" in text
        assert "    const repo = yield* UserProfileRepository\n" in text
        assert 'Effect.withSpan("UserProfileService.get", { attributes: { id } })' in text

    def test_layers(self, registry, context, fragments):
        text = registry.compile("feature/layers", context, fragments).value
        assert "PubsubService.Live)" in text
        assert (
            "export const UserProfileFeatureTest = "
            "Layer.mergeAll(UserProfileService.Live, UserProfileRepository.Live)"
            ".pipe(Layer.provide(InfrastructureTest))"
        ) in text


class TestProviderLibrary:
    def test_compiles(self, registry, context, fragments):
        results = registry.compile_library("provider", context, fragments)
        assert list(results) == ["provider/errors", "provider/service"]
        assert all(result.success for result in results.values())

    def test_errors(self, registry, context, fragments):
        text = registry.compile("provider/errors", context, fragments).value
        for name in ("Error", "NotFoundError", "RateLimitError", "AuthenticationError", "NetworkError"):
            assert f'export class UserProfile{name} extends Data.TaggedError("UserProfile{name}")' in text
        assert "  | UserProfileTimeoutError" in text

    def test_service(self, registry, context, fragments):
        text = registry.compile("provider/service", context, fragments).value
        assert 'Context.Tag("@acme/provider-user-profile/UserProfileService")' in text
        assert "apiKey: Redacted.make(env.USER_PROFILE_API_KEY)" in text
        assert 'Effect.fail(UserProfileNotFoundError.create(id, "Resource"))' in text
        assert text.index("static Live = ") < text.index("static Test = ")


class TestGenerate:
    def test_generate_library(self):
        results = generate_library("order", "contract", scope="@shop")
        assert set(results) == {"contract/errors", "contract/rpc-definitions"}
        assert "export class OrderNotFoundError" in results["contract/errors"].value

    def test_generate_library_file_types(self):
        results = generate_library("order", "provider", file_types=["errors"])
        assert list(results) == ["provider/errors"]

    def test_generate_full_domain(self):
        domain = generate_domain("order", scope="@shop")
        assert tuple(domain) == FULL_DOMAIN
        assert list(domain["data-access"]) == ["data-access/errors", "data-access/layers"]
        assert all(
            result.success for results in domain.values() for result in results.values()
        )
        assert "@shop/feature-order/OrderService" in domain["feature"]["feature/service"].value

    def test_generate_selected_library_types(self):
        domain = generate_domain("order", ["infra"], includeAutoLayer=True)
        assert list(domain) == ["infra"]
        assert "export const OrderServiceAuto" in domain["infra"]["infra/service"].value
