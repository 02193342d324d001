"""Tests for provider selection."""

import logging

import pytest

from logscrub.providers.selector import NoConfiguredProviderError, ProviderSelector


class TestProviderSelector:
    """Test suite for ProviderSelector."""

    def test_register_and_get(self, fake_provider) -> None:
        """Test case-insensitive lookup."""
        provider = fake_provider("Ollama")
        selector = ProviderSelector([provider])

        assert selector.get("ollama") is provider
        assert selector.get(" OLLAMA ") is provider
        assert selector.get("OpenAI") is None

    def test_duplicate_name_rejected(self, fake_provider) -> None:
        """Test that names must be unique ignoring case."""
        selector = ProviderSelector([fake_provider("Ollama")])

        with pytest.raises(ValueError, match="already registered"):
            selector.register(fake_provider("ollama"))

    def test_get_all_keeps_order(self, fake_provider) -> None:
        """Test registration order."""
        providers = [fake_provider("A"), fake_provider("B"), fake_provider("C")]
        assert ProviderSelector(providers).get_all() == providers

    def test_preferred_provider(self, fake_provider) -> None:
        """Test that a configured preferred provider wins."""
        a, b = fake_provider("A"), fake_provider("B")
        selector = ProviderSelector([a, b], default_provider="A")

        assert selector.get_provider("b") is b

    def test_default_provider(self, fake_provider) -> None:
        """Test the configured default when no preference is given."""
        a, b = fake_provider("A"), fake_provider("B")
        selector = ProviderSelector([a, b], default_provider="B")

        assert selector.get_provider() is b
        assert selector.get_provider("  ") is b

    def test_unconfigured_preferred_falls_back_to_default(self, fake_provider) -> None:
        """Test skipping an unconfigured preferred provider."""
        a = fake_provider("A", configured=False)
        b = fake_provider("B")
        c = fake_provider("C")
        selector = ProviderSelector([a, b, c], default_provider="C")

        assert selector.get_provider("A") is c

    def test_unknown_preferred_falls_back_to_first_configured(
        self, fake_provider, caplog: pytest.LogCaptureFixture
    ) -> None:
        """Test fallback in registration order with a warning."""
        a = fake_provider("A", configured=False)
        b = fake_provider("B")
        selector = ProviderSelector([a, b])

        with caplog.at_level(logging.WARNING, logger="logscrub.providers.selector"):
            assert selector.get_provider("Missing") is b

        assert "'Missing' was requested but not registered" in caplog.text

    def test_unconfigured_default_falls_back(self, fake_provider) -> None:
        """Test fallback when the default is not configured."""
        a = fake_provider("A", configured=False)
        b = fake_provider("B")
        selector = ProviderSelector([a, b], default_provider="A")

        assert selector.get_provider() is b

    def test_configuration_is_checked_on_every_call(self, fake_provider) -> None:
        """Test that nothing is cached between calls."""
        a = fake_provider("A")
        b = fake_provider("B")
        selector = ProviderSelector([a, b])

        assert selector.get_provider() is a
        a._configured = False
        assert selector.get_provider() is b

    def test_no_providers_registered(self) -> None:
        """Test the empty registry."""
        with pytest.raises(NoConfiguredProviderError, match="No AI providers are registered"):
            ProviderSelector().get_provider()

    def test_no_configured_provider(self, fake_provider) -> None:
        """Test the error lists registered providers."""
        selector = ProviderSelector(
            [fake_provider("A", configured=False), fake_provider("B", configured=False)]
        )

        with pytest.raises(NoConfiguredProviderError) as exc_info:
            selector.get_provider("A")

        assert str(exc_info.value) == (
            "No configured AI providers are available. Registered providers: A, B."
        )
        assert exc_info.value.registered == ["A", "B"]

    def test_describe(self, fake_provider) -> None:
        """Test the display summary."""
        selector = ProviderSelector(
            [fake_provider("A", configured=False), fake_provider("B")], default_provider="b"
        )

        assert selector.describe() == [
            {"name": "A", "configured": False, "default": False},
            {"name": "B", "configured": True, "default": True},
        ]

    @pytest.mark.asyncio
    async def test_close(self, fake_provider) -> None:
        """Test that every provider is closed."""
        providers = [fake_provider("A"), fake_provider("B")]
        await ProviderSelector(providers).close()

        assert all(p.closed for p in providers)
