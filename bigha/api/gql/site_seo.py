"""
Site SEO: global settings, static page entries and schema.org markup.

Every field requires properties:seo_manage.
"""

import graphene
from graphene.types.generic import GenericScalar

from bigha.api.gql.errors import parse_input
from bigha.api.gql.guards import permission_required
from bigha.api.gql.types import (
    GlobalSeoSettings,
    OperationResult,
    SchemaSetting,
    SeoPage,
    SeoPageStatusEnum,
)
from bigha.exceptions import InvalidInputError
from bigha.schemas.site_seo import (
    GlobalSeoSettingsUpdate,
    HomePageSeoInput,
    SchemaSettingCreate,
    SchemaSettingUpdate,
    SeoPageCreate,
    SeoPageUpdate,
    normalize_url_path,
)
from bigha.services.site_seo_service import SiteSeoService

SEO_PERMISSION = "properties:seo_manage"


def _seo(info) -> SiteSeoService:
    return SiteSeoService(info.context.session)


# =============================================================================
# Inputs
# =============================================================================


class GlobalSeoSettingsInput(graphene.InputObjectType):
    site_title = graphene.String()
    meta_description = graphene.String()
    keywords = graphene.String()
    og_title = graphene.String()
    og_description = graphene.String()
    og_image = graphene.String()


class SeoPageFields:
    description = graphene.String()
    keywords = graphene.String()
    image = graphene.String()
    schema_type = graphene.String()
    schema_description = graphene.String()


class CreateSeoPageInput(SeoPageFields, graphene.InputObjectType):
    page = graphene.String(required=True)
    url = graphene.String(required=True)
    title = graphene.String(required=True)
    status = graphene.InputField(SeoPageStatusEnum)


class UpdateSeoPageInput(SeoPageFields, graphene.InputObjectType):
    page = graphene.String()
    url = graphene.String()
    title = graphene.String()


class HomePageSeoPageInput(SeoPageFields, graphene.InputObjectType):
    title = graphene.String()


class CreateSchemaSettingInput(graphene.InputObjectType):
    type = graphene.String(required=True)
    data = GenericScalar(required=True)
    is_active = graphene.Boolean()


class UpdateSchemaSettingInput(graphene.InputObjectType):
    type = graphene.String()
    data = GenericScalar()
    is_active = graphene.Boolean()


# =============================================================================
# Queries
# =============================================================================


class SiteSeoQuery(graphene.ObjectType):
    global_seo_settings = graphene.Field(GlobalSeoSettings)
    seo_pages = graphene.List(graphene.NonNull(SeoPage), required=True, status=SeoPageStatusEnum())
    seo_page = graphene.Field(SeoPage, required=True, id=graphene.UUID(required=True))
    seo_page_by_url = graphene.Field(SeoPage, url=graphene.String(required=True))
    home_page_seo = graphene.Field(SeoPage)
    schema_settings = graphene.List(
        graphene.NonNull(SchemaSetting),
        required=True,
        type=graphene.String(),
        active_only=graphene.Boolean(default_value=False),
    )
    schema_setting = graphene.Field(SchemaSetting, required=True, id=graphene.UUID(required=True))

    @staticmethod
    @permission_required(SEO_PERMISSION)
    async def resolve_global_seo_settings(root, info):
        return await _seo(info).get_global_settings()

    @staticmethod
    @permission_required(SEO_PERMISSION)
    async def resolve_seo_pages(root, info, status=None):
        return await _seo(info).list_pages(status)

    @staticmethod
    @permission_required(SEO_PERMISSION)
    async def resolve_seo_page(root, info, id):
        return await _seo(info).get_page(id)

    @staticmethod
    @permission_required(SEO_PERMISSION)
    async def resolve_seo_page_by_url(root, info, url):
        try:
            path = normalize_url_path(url)
        except ValueError as exc:
            raise InvalidInputError(str(exc)) from exc
        return await _seo(info).get_page_by_url(path)

    @staticmethod
    @permission_required(SEO_PERMISSION)
    async def resolve_home_page_seo(root, info):
        return await _seo(info).get_home_page()

    @staticmethod
    @permission_required(SEO_PERMISSION)
    async def resolve_schema_settings(root, info, active_only, type=None):
        return await _seo(info).list_schema_settings(type, active_only)

    @staticmethod
    @permission_required(SEO_PERMISSION)
    async def resolve_schema_setting(root, info, id):
        return await _seo(info).get_schema_setting(id)


# =============================================================================
# Mutations
# =============================================================================


class UpdateGlobalSeoSettings(graphene.Mutation):
    class Arguments:
        input = GlobalSeoSettingsInput(required=True)

    Output = GlobalSeoSettings

    @staticmethod
    @permission_required(SEO_PERMISSION)
    async def mutate(root, info, input):
        data = parse_input(GlobalSeoSettingsUpdate, input)
        return await _seo(info).update_global_settings(data, info.context.require_admin().id, meta=info.context.meta)


class CreateSeoPage(graphene.Mutation):
    class Arguments:
        input = CreateSeoPageInput(required=True)

    Output = SeoPage

    @staticmethod
    @permission_required(SEO_PERMISSION)
    async def mutate(root, info, input):
        data = parse_input(SeoPageCreate, input)
        return await _seo(info).create_page(data, info.context.require_admin().id, meta=info.context.meta)


class UpdateSeoPage(graphene.Mutation):
    class Arguments:
        id = graphene.UUID(required=True)
        input = UpdateSeoPageInput(required=True)

    Output = SeoPage

    @staticmethod
    @permission_required(SEO_PERMISSION)
    async def mutate(root, info, id, input):
        data = parse_input(SeoPageUpdate, input)
        return await _seo(info).update_page(id, data, info.context.require_admin().id, meta=info.context.meta)


class DeleteSeoPage(graphene.Mutation):
    class Arguments:
        id = graphene.UUID(required=True)

    Output = OperationResult

    @staticmethod
    @permission_required(SEO_PERMISSION)
    async def mutate(root, info, id):
        deleted = await _seo(info).delete_page(id, info.context.require_admin().id, meta=info.context.meta)
        return OperationResult(success=deleted, message="SEO page deleted")


class PublishSeoPage(graphene.Mutation):
    class Arguments:
        id = graphene.UUID(required=True)

    Output = SeoPage

    @staticmethod
    @permission_required(SEO_PERMISSION)
    async def mutate(root, info, id):
        return await _seo(info).publish_page(id, info.context.require_admin().id, meta=info.context.meta)


class UnpublishSeoPage(graphene.Mutation):
    class Arguments:
        id = graphene.UUID(required=True)

    Output = SeoPage

    @staticmethod
    @permission_required(SEO_PERMISSION)
    async def mutate(root, info, id):
        return await _seo(info).unpublish_page(id, info.context.require_admin().id, meta=info.context.meta)


class EnableSeoPage(graphene.Mutation):
    class Arguments:
        id = graphene.UUID(required=True)

    Output = SeoPage

    @staticmethod
    @permission_required(SEO_PERMISSION)
    async def mutate(root, info, id):
        return await _seo(info).enable_page(id, info.context.require_admin().id, meta=info.context.meta)


class DisableSeoPage(graphene.Mutation):
    class Arguments:
        id = graphene.UUID(required=True)

    Output = SeoPage

    @staticmethod
    @permission_required(SEO_PERMISSION)
    async def mutate(root, info, id):
        return await _seo(info).disable_page(id, info.context.require_admin().id, meta=info.context.meta)


class SetHomePageSeo(graphene.Mutation):
    class Arguments:
        input = HomePageSeoPageInput(required=True)

    Output = SeoPage

    @staticmethod
    @permission_required(SEO_PERMISSION)
    async def mutate(root, info, input):
        data = parse_input(HomePageSeoInput, input)
        return await _seo(info).set_home_page(data, info.context.require_admin().id, meta=info.context.meta)


class UpdateHomePageSeo(graphene.Mutation):
    class Arguments:
        input = HomePageSeoPageInput(required=True)

    Output = SeoPage

    @staticmethod
    @permission_required(SEO_PERMISSION)
    async def mutate(root, info, input):
        data = parse_input(HomePageSeoInput, input)
        return await _seo(info).update_home_page(data, info.context.require_admin().id, meta=info.context.meta)


class CreateSchemaSetting(graphene.Mutation):
    class Arguments:
        input = CreateSchemaSettingInput(required=True)

    Output = SchemaSetting

    @staticmethod
    @permission_required(SEO_PERMISSION)
    async def mutate(root, info, input):
        data = parse_input(SchemaSettingCreate, input)
        return await _seo(info).create_schema_setting(data, info.context.require_admin().id, meta=info.context.meta)


class UpdateSchemaSetting(graphene.Mutation):
    class Arguments:
        id = graphene.UUID(required=True)
        input = UpdateSchemaSettingInput(required=True)

    Output = SchemaSetting

    @staticmethod
    @permission_required(SEO_PERMISSION)
    async def mutate(root, info, id, input):
        data = parse_input(SchemaSettingUpdate, input)
        return await _seo(info).update_schema_setting(
            id, data, info.context.require_admin().id, meta=info.context.meta
        )


class SetSchemaSettingActive(graphene.Mutation):
    """Enable or disable a schema block. Omitting ``active`` toggles it."""

    class Arguments:
        id = graphene.UUID(required=True)
        active = graphene.Boolean()

    Output = SchemaSetting

    @staticmethod
    @permission_required(SEO_PERMISSION)
    async def mutate(root, info, id, active=None):
        return await _seo(info).set_schema_setting_active(
            id, active, info.context.require_admin().id, meta=info.context.meta
        )


class DeleteSchemaSetting(graphene.Mutation):
    class Arguments:
        id = graphene.UUID(required=True)

    Output = OperationResult

    @staticmethod
    @permission_required(SEO_PERMISSION)
    async def mutate(root, info, id):
        deleted = await _seo(info).delete_schema_setting(id, info.context.require_admin().id, meta=info.context.meta)
        return OperationResult(success=deleted, message="Schema setting deleted")


class SiteSeoMutation(graphene.ObjectType):
    update_global_seo_settings = UpdateGlobalSeoSettings.Field()
    create_seo_page = CreateSeoPage.Field()
    update_seo_page = UpdateSeoPage.Field()
    delete_seo_page = DeleteSeoPage.Field()
    publish_seo_page = PublishSeoPage.Field()
    unpublish_seo_page = UnpublishSeoPage.Field()
    enable_seo_page = EnableSeoPage.Field()
    disable_seo_page = DisableSeoPage.Field()
    set_home_page_seo = SetHomePageSeo.Field()
    update_home_page_seo = UpdateHomePageSeo.Field()
    create_schema_setting = CreateSchemaSetting.Field()
    update_schema_setting = UpdateSchemaSetting.Field()
    set_schema_setting_active = SetSchemaSettingActive.Field()
    delete_schema_setting = DeleteSchemaSetting.Field()
