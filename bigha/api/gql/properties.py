"""
Property CRUD, publication, verification, SEO and image operations.
"""

import graphene
from graphene.types.generic import GenericScalar

from bigha.api.gql.errors import page_args, parse_input
from bigha.api.gql.guards import permission_required
from bigha.api.gql.types import (
    ApprovalStatusEnum,
    AreaUnitEnum,
    ListingAsEnum,
    OperationResult,
    Property,
    PropertyPage,
    PropertyTypeEnum,
    PublicationStatusEnum,
)
from bigha.schemas.property import (
    PropertyCreate,
    PropertyFilter,
    PropertyImageCreate,
    PropertySeoUpdate,
    PropertyUpdate,
)
from bigha.services.property_service import PropertyService
from bigha.services.seo_service import SeoService


def _properties(info) -> PropertyService:
    return PropertyService(info.context.session)


@permission_required("properties:view")
async def load_approval_history(prop, info):
    """Approval history of ``prop``, newest first."""
    return await _properties(info).approval_history(prop.id)


# =============================================================================
# Inputs
# =============================================================================


class PropertyFields:
    description = graphene.String()
    price = graphene.Float()
    area = graphene.Float()
    area_unit = graphene.InputField(AreaUnitEnum)
    khasra_number = graphene.String()
    murabba_number = graphene.String()
    khewat_number = graphene.String()
    address = graphene.String()
    city = graphene.String()
    district = graphene.String()
    state = graphene.String()
    country = graphene.String()
    pin_code = graphene.String()
    location = GenericScalar()
    listing_as = graphene.InputField(ListingAsEnum)
    owner_name = graphene.String()
    owner_phone = graphene.String()
    owner_whatsapp = graphene.String()
    owner_email = graphene.String()


class CreatePropertyInput(PropertyFields, graphene.InputObjectType):
    title = graphene.String(required=True)
    property_type = graphene.InputField(PropertyTypeEnum, required=True)
    status = graphene.InputField(PublicationStatusEnum)
    is_featured = graphene.Boolean()


class UpdatePropertyInput(PropertyFields, graphene.InputObjectType):
    title = graphene.String()
    property_type = graphene.InputField(PropertyTypeEnum)
    price_change_reason = graphene.String()


class PropertyFilterInput(graphene.InputObjectType):
    approval_status = graphene.InputField(ApprovalStatusEnum)
    status = graphene.InputField(PublicationStatusEnum)
    property_type = graphene.InputField(PropertyTypeEnum)
    city = graphene.String()
    state = graphene.String()
    is_active = graphene.Boolean()
    is_featured = graphene.Boolean()
    is_verified = graphene.Boolean()
    search = graphene.String()


class PropertySeoInput(graphene.InputObjectType):
    slug = graphene.String()
    seo_title = graphene.String()
    seo_description = graphene.String()
    seo_keywords = graphene.String()
    canonical_url = graphene.String()
    structured_data = GenericScalar()


class PropertyImageInput(graphene.InputObjectType):
    image_url = graphene.String(required=True)
    image_type = graphene.String()
    caption = graphene.String()
    alt_text = graphene.String()
    sort_order = graphene.Int()
    is_main = graphene.Boolean()


# =============================================================================
# Queries
# =============================================================================


class PropertyQuery(graphene.ObjectType):
    property = graphene.Field(Property, required=True, id=graphene.UUID(required=True))
    properties = graphene.Field(
        PropertyPage,
        required=True,
        filter=PropertyFilterInput(),
        limit=graphene.Int(default_value=20),
        offset=graphene.Int(default_value=0),
    )

    @staticmethod
    @permission_required("properties:view")
    async def resolve_property(root, info, id):
        return await _properties(info).get_property(id)

    @staticmethod
    @permission_required("properties:view")
    async def resolve_properties(root, info, limit, offset, filter=None):
        page = page_args(limit, offset)
        filters = parse_input(PropertyFilter, filter)
        return await _properties(info).list_properties(filters, limit=page.limit, offset=page.offset)


# =============================================================================
# Mutations
# =============================================================================


class CreateProperty(graphene.Mutation):
    class Arguments:
        input = CreatePropertyInput(required=True)

    Output = Property

    @staticmethod
    @permission_required("properties:create")
    async def mutate(root, info, input):
        data = parse_input(PropertyCreate, input)
        return await _properties(info).create_property(data, info.context.require_admin().id, meta=info.context.meta)


class UpdateProperty(graphene.Mutation):
    class Arguments:
        id = graphene.UUID(required=True)
        input = UpdatePropertyInput(required=True)

    Output = Property

    @staticmethod
    @permission_required("properties:edit")
    async def mutate(root, info, id, input):
        data = parse_input(PropertyUpdate, input)
        return await _properties(info).update_property(
            id, data, info.context.require_admin().id, meta=info.context.meta
        )


class ArchiveProperty(graphene.Mutation):
    class Arguments:
        id = graphene.UUID(required=True)

    Output = Property

    @staticmethod
    @permission_required("properties:edit")
    async def mutate(root, info, id):
        return await _properties(info).archive_property(id, info.context.require_admin().id, meta=info.context.meta)


class RestoreProperty(graphene.Mutation):
    class Arguments:
        id = graphene.UUID(required=True)

    Output = Property

    @staticmethod
    @permission_required("properties:edit")
    async def mutate(root, info, id):
        return await _properties(info).restore_property(id, info.context.require_admin().id, meta=info.context.meta)


class DeleteProperty(graphene.Mutation):
    class Arguments:
        id = graphene.UUID(required=True)

    Output = OperationResult

    @staticmethod
    @permission_required("properties:delete")
    async def mutate(root, info, id):
        deleted = await _properties(info).delete_property(id, info.context.require_admin().id, meta=info.context.meta)
        return OperationResult(success=deleted, message="Property deleted")


class PublishProperty(graphene.Mutation):
    class Arguments:
        id = graphene.UUID(required=True)

    Output = Property

    @staticmethod
    @permission_required("properties:edit")
    async def mutate(root, info, id):
        return await _properties(info).publish_property(id, info.context.require_admin().id, meta=info.context.meta)


class UnpublishProperty(graphene.Mutation):
    class Arguments:
        id = graphene.UUID(required=True)

    Output = Property

    @staticmethod
    @permission_required("properties:edit")
    async def mutate(root, info, id):
        return await _properties(info).unpublish_property(id, info.context.require_admin().id, meta=info.context.meta)


class SetPropertyFeatured(graphene.Mutation):
    class Arguments:
        id = graphene.UUID(required=True)
        featured = graphene.Boolean(required=True)

    Output = Property

    @staticmethod
    @permission_required("properties:feature")
    async def mutate(root, info, id, featured):
        return await _properties(info).set_featured(
            id, featured, info.context.require_admin().id, meta=info.context.meta
        )


class VerifyProperty(graphene.Mutation):
    class Arguments:
        id = graphene.UUID(required=True)
        is_verified = graphene.Boolean(required=True)
        message = graphene.String()
        notes = graphene.String()

    Output = Property

    @staticmethod
    @permission_required("properties:verify")
    async def mutate(root, info, id, is_verified, message=None, notes=None):
        return await _properties(info).verify_property(
            id,
            is_verified,
            info.context.require_admin().id,
            message=message,
            notes=notes,
            meta=info.context.meta,
        )


class UpdatePropertySeo(graphene.Mutation):
    class Arguments:
        property_id = graphene.UUID(required=True)
        input = PropertySeoInput(required=True)

    Output = Property

    @staticmethod
    @permission_required("properties:seo_manage")
    async def mutate(root, info, property_id, input):
        data = parse_input(PropertySeoUpdate, input)
        return await SeoService(info.context.session).update_seo(
            property_id, data, info.context.require_admin().id, meta=info.context.meta
        )


class RegeneratePropertySeo(graphene.Mutation):
    class Arguments:
        property_id = graphene.UUID(required=True)

    Output = Property

    @staticmethod
    @permission_required("properties:seo_manage")
    async def mutate(root, info, property_id):
        return await SeoService(info.context.session).regenerate_seo(
            property_id, info.context.require_admin().id, meta=info.context.meta
        )


class AddPropertyImage(graphene.Mutation):
    class Arguments:
        property_id = graphene.UUID(required=True)
        input = PropertyImageInput(required=True)

    Output = Property

    @staticmethod
    @permission_required("properties:edit")
    async def mutate(root, info, property_id, input):
        data = parse_input(PropertyImageCreate, input)
        return await _properties(info).add_image(
            property_id, data, info.context.require_admin().id, meta=info.context.meta
        )


class RemovePropertyImage(graphene.Mutation):
    class Arguments:
        property_id = graphene.UUID(required=True)
        image_id = graphene.UUID(required=True)

    Output = Property

    @staticmethod
    @permission_required("properties:edit")
    async def mutate(root, info, property_id, image_id):
        return await _properties(info).remove_image(
            property_id, image_id, info.context.require_admin().id, meta=info.context.meta
        )


class PropertyMutation(graphene.ObjectType):
    create_property = CreateProperty.Field()
    update_property = UpdateProperty.Field()
    archive_property = ArchiveProperty.Field()
    restore_property = RestoreProperty.Field()
    delete_property = DeleteProperty.Field()
    publish_property = PublishProperty.Field()
    unpublish_property = UnpublishProperty.Field()
    set_property_featured = SetPropertyFeatured.Field()
    verify_property = VerifyProperty.Field()
    update_property_seo = UpdatePropertySeo.Field()
    regenerate_property_seo = RegeneratePropertySeo.Field()
    add_property_image = AddPropertyImage.Field()
    remove_property_image = RemovePropertyImage.Field()
