# Restores a member's roles when they rejoin a guild
class RoleSnapshotService:
    def __init__(self, repository, logger):
        self.repository = repository
        self.logger = logger

    async def handle_member_remove(self, member) -> None:
        if member.bot:
            return
        role_ids = [role.id for role in member.roles if not role.is_default()]
        if not role_ids:
            return
        self.logger.info(f"Storing {len(role_ids)} role(s) for {member} in guild {member.guild.id}")
        self.repository.save(member.guild.id, member.id, role_ids)

    async def handle_member_join(self, member) -> int:
        role_ids = self.repository.load(member.guild.id, member.id)
        if not role_ids:
            return 0
        self.logger.info(f"Restoring roles for {member}")
        restored = 0
        for role_id in role_ids:
            role = member.guild.get_role(role_id)
            if role is None:
                self.logger.debug(f"Role {role_id} no longer exists in guild {member.guild.id}")
                continue
            try:
                await member.add_roles(role, reason="Role restore")
                restored += 1
            except Exception as exc:
                self.logger.warning(f"Failed to add role {role_id} to {member}: {exc}")
        self.repository.delete(member.guild.id, member.id)
        return restored
